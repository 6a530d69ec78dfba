"""
===============================================================================
TARJETA CRC — dependencies.py (Guardas de acceso para rutas FastAPI)
===============================================================================

Responsabilidades:
  - Traducir una denegación del núcleo de acceso a 403 (RFC7807).
  - Exponer dependencias:
      * require_permiso_gestion(llave): requiere permiso de gestión sobre la
        residencia de la ruta (path param `residencia_id`).
      * require_usuario_asistido(): requiere poder actuar por el usuario de la
        ruta (path param `id_usuario_asistido`).
  - Devolver el ResultadoAcceso a la ruta para que aplique Todas/Propias.

Colaboradores:
  - application.autorizacion (casos de uso)
  - crosscutting.error_responses (forbidden / unauthorized / ...)
  - crosscutting.logger

Notas:
  - La autenticación es externa: `get_sesion` lee request.state.sesion, que
    setea el middleware de autenticación de la app anfitriona (o un override).
  - El repositorio de perfiles se toma de app.state.usuario_repository.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request

from ....application.autorizacion import (
    ContextoSesion,
    VerificarPermisoGestionUseCase,
    VerificarPermisoUsuarioAsistidoUseCase,
)
from ....crosscutting.error_responses import (
    forbidden,
    internal_error,
    service_unavailable,
    unauthorized,
)
from ....crosscutting.exceptions import AccesoError
from ....crosscutting.logger import logger
from ....domain.acceso_privilegiado import (
    ResultadoAcceso,
    normalizar_llave_permiso,
)
from ....domain.repositories import UsuarioRepository
from ....domain.usuarios import LlavePermisoGestion
from ....domain.ventana_tiempo import ValidadorVentanaTiempo

_MSG_SIN_PERMISO_GESTION = "No tienes permiso para realizar esta acción."
_MSG_SIN_PERMISO_ASISTIDO = "No tienes permiso para actuar en nombre de este usuario."


async def get_sesion(request: Request) -> ContextoSesion | None:
    """Sesión autenticada del request (None si no hay)."""
    return getattr(request.state, "sesion", None)


def get_usuario_repository(request: Request) -> UsuarioRepository:
    repositorio = getattr(request.app.state, "usuario_repository", None)
    if repositorio is None:
        logger.error("usuario_repository no configurado en app.state")
        raise service_unavailable("perfiles de usuario")
    return repositorio


def _rechazar(resultado: ResultadoAcceso, detalle: str, **extra: object) -> None:
    logger.warning(
        "Acceso denegado",
        extra={"motivo": resultado.error, **extra},
    )
    raise forbidden(detalle)


def require_permiso_gestion(
    llave_permiso: LlavePermisoGestion | str,
    *,
    validador: ValidadorVentanaTiempo | None = None,
) -> Callable:
    """Dependency FastAPI: requiere permiso de gestión para `llave_permiso`."""
    llave = normalizar_llave_permiso(llave_permiso)

    async def dependency(
        residencia_id: str,
        sesion: ContextoSesion | None = Depends(get_sesion),
        repositorio: UsuarioRepository = Depends(get_usuario_repository),
    ) -> ResultadoAcceso:
        if sesion is None:
            raise unauthorized()

        try:
            resultado = await VerificarPermisoGestionUseCase(
                repositorio, validador
            ).execute(sesion, llave, residencia_id)
        except AccesoError as exc:
            logger.error(
                "Falla evaluando permiso de gestión",
                exc_info=True,
                extra={"error_id": exc.error_id, "error_code": exc.error_code},
            )
            raise internal_error() from exc

        if not resultado.tiene_acceso:
            _rechazar(resultado, _MSG_SIN_PERMISO_GESTION, llave_permiso=llave.value)
        return resultado

    return dependency


def require_usuario_asistido(
    *, validador: ValidadorVentanaTiempo | None = None
) -> Callable:
    """Dependency FastAPI: requiere poder actuar por `id_usuario_asistido`."""

    async def dependency(
        id_usuario_asistido: str,
        sesion: ContextoSesion | None = Depends(get_sesion),
        repositorio: UsuarioRepository = Depends(get_usuario_repository),
    ) -> ResultadoAcceso:
        if sesion is None:
            raise unauthorized()

        try:
            resultado = await VerificarPermisoUsuarioAsistidoUseCase(
                repositorio, validador
            ).execute(sesion, id_usuario_asistido)
        except AccesoError as exc:
            logger.error(
                "Falla evaluando permiso de usuario asistido",
                exc_info=True,
                extra={"error_id": exc.error_id, "error_code": exc.error_code},
            )
            raise internal_error() from exc

        if not resultado.tiene_acceso:
            _rechazar(
                resultado,
                _MSG_SIN_PERMISO_ASISTIDO,
                usuario_asistido=id_usuario_asistido,
            )
        return resultado

    return dependency
