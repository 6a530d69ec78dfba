"""
===============================================================================
AUTHORIZATION USE CASES (Gestión / Usuario asistido)
===============================================================================

Name:
    Authorization Use Cases

Business Goal:
    Dar a las acciones de servidor un único punto para decidir si el actor
    autenticado puede ejecutar una mutación privilegiada, garantizando:
      - carga del perfil completo solo cuando hace falta (asistentes)
      - denegación explícita (no excepción) si el perfil no se puede leer
      - traducción uniforme del alcance Todas/Propias a registros concretos

Why (Context / Intención):
    - Las acciones de servidor repetían la misma secuencia: armar el usuario
      desde la sesión, leer el perfil del asistente, evaluar, filtrar.
    - Centralizar evita inconsistencias entre recursos.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    autorizacion (use cases + helpers)

Responsibilities:
    - VerificarPermisoGestionUseCase: sesión + llave -> ResultadoAcceso.
    - VerificarPermisoUsuarioAsistidoUseCase: sesión + usuario -> ResultadoAcceso.
    - puede_actuar_sobre_registro: aplica Todas/Propias a un registro.
    - componer_accesos: combina decisiones con AND (TODOS) u OR (ALGUNO).

Collaborators:
    - domain.repositories.UsuarioRepository
    - domain.acceso_privilegiado (evaluadores)
    - crosscutting.config / crosscutting.logger
    - context (usuario_id / residencia_id para logs)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Iterable, Tuple

from ..context import set_acceso_context
from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import PerfilUsuarioError
from ..crosscutting.logger import logger
from ..domain.acceso_privilegiado import (
    PoliticaFalloVentana,
    ResultadoAcceso,
    verificar_permiso_gestion,
    verificar_permiso_usuario_asistido,
)
from ..domain.repositories import UsuarioRepository
from ..domain.usuarios import (
    ROL_ASISTENTE,
    LlavePermisoGestion,
    NivelAcceso,
    RolUsuario,
    Usuario,
)
from ..domain.ventana_tiempo import ValidadorVentanaTiempo

_MSG_ERROR_CONSULTA: Final[str] = "Error en la consulta de usuario asistente."
_MSG_NO_ENCONTRADO: Final[str] = "Usuario asistente no encontrado."


@dataclass(frozen=True)
class ContextoSesion:
    """
    Datos ya autenticados de la sesión (claims verificados por el caller).

    Nota:
      - La verificación de la cookie/token es externa a este paquete.
    """

    usuario_id: str
    residencia_id: str | None
    roles: frozenset[RolUsuario] = field(default_factory=frozenset)
    zona_horaria: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "roles", frozenset(RolUsuario(r) for r in (self.roles or ()))
        )

    def es_asistente(self) -> bool:
        return ROL_ASISTENTE in self.roles


async def _cargar_actor(
    sesion: ContextoSesion, repositorio: UsuarioRepository
) -> Tuple[Usuario | None, ResultadoAcceso | None]:
    """
    Construye el Usuario a evaluar desde la sesión.

    Reglas:
      - No asistentes: basta con los claims de la sesión.
      - Asistentes: se lee el perfil completo (permisos delegados).

    Retorna:
      - (usuario, None) si se pudo construir
      - (None, ResultadoAcceso denegado) si falló la lectura del perfil
    """
    usuario = Usuario(
        id=sesion.usuario_id,
        roles=sesion.roles,
        residencia_id=sesion.residencia_id,
    )
    if not sesion.es_asistente():
        return usuario, None

    try:
        perfil = await repositorio.obtener_usuario(sesion.usuario_id)
    except Exception as exc:
        error = PerfilUsuarioError(_MSG_ERROR_CONSULTA, original_error=exc)
        logger.error(
            error.message,
            exc_info=True,
            extra={
                "error_id": error.error_id,
                "error_code": error.error_code,
                "usuario_consultado": sesion.usuario_id,
            },
        )
        return None, ResultadoAcceso.denegado(_MSG_ERROR_CONSULTA)

    if perfil is None:
        logger.warning(
            "Usuario asistente sin documento de perfil",
            extra={"usuario_consultado": sesion.usuario_id},
        )
        return None, ResultadoAcceso.denegado(_MSG_NO_ENCONTRADO)

    return (
        Usuario(
            id=sesion.usuario_id,
            roles=sesion.roles,
            residencia_id=sesion.residencia_id,
            asistente=perfil.asistente,
        ),
        None,
    )


def _zona_horaria(sesion: ContextoSesion) -> str:
    return sesion.zona_horaria or get_settings().zona_horaria_default


class VerificarPermisoGestionUseCase:
    """
    Verifica el permiso de gestión del actor de la sesión.

    Si no se indica residencia objetivo, se usa la de la sesión.
    """

    def __init__(
        self,
        repositorio: UsuarioRepository,
        validador: ValidadorVentanaTiempo | None = None,
        politica_fallo: PoliticaFalloVentana | str | None = None,
    ) -> None:
        self._repositorio = repositorio
        self._validador = validador
        self._politica_fallo = politica_fallo

    async def execute(
        self,
        sesion: ContextoSesion,
        llave_permiso: LlavePermisoGestion | str,
        residencia_id: str | None = None,
    ) -> ResultadoAcceso:
        residencia_objetivo = residencia_id or sesion.residencia_id or ""
        set_acceso_context(
            usuario_id=sesion.usuario_id, residencia_id=residencia_objetivo
        )

        usuario, error = await _cargar_actor(sesion, self._repositorio)
        if error is not None:
            return error

        return await verificar_permiso_gestion(
            usuario,
            residencia_objetivo,
            llave_permiso,
            _zona_horaria(sesion),
            validador=self._validador,
            politica_fallo=self._politica_fallo,
        )


class VerificarPermisoUsuarioAsistidoUseCase:
    """Verifica si el actor de la sesión puede actuar por otro usuario."""

    def __init__(
        self,
        repositorio: UsuarioRepository,
        validador: ValidadorVentanaTiempo | None = None,
        politica_fallo: PoliticaFalloVentana | str | None = None,
    ) -> None:
        self._repositorio = repositorio
        self._validador = validador
        self._politica_fallo = politica_fallo

    async def execute(
        self, sesion: ContextoSesion, id_usuario_asistido: str
    ) -> ResultadoAcceso:
        set_acceso_context(
            usuario_id=sesion.usuario_id, residencia_id=sesion.residencia_id or ""
        )

        usuario, error = await _cargar_actor(sesion, self._repositorio)
        if error is not None:
            return error

        return await verificar_permiso_usuario_asistido(
            usuario,
            id_usuario_asistido,
            _zona_horaria(sesion),
            validador=self._validador,
            politica_fallo=self._politica_fallo,
        )


def puede_actuar_sobre_registro(
    resultado: ResultadoAcceso, *, creado_por: str | None, usuario_id: str
) -> bool:
    """
    Aplica el alcance de una decisión a un registro concreto.

      - Todas: cualquier registro.
      - Propias: solo registros creados por el propio usuario.
      - Ninguna: nada.
    """
    if not resultado.tiene_acceso:
        return False
    if resultado.nivel_acceso == NivelAcceso.TODAS:
        return True
    return creado_por is not None and creado_por == usuario_id


class ModoComposicion(str, Enum):
    """Cómo combinar decisiones independientes."""

    TODOS = "todos"  # AND
    ALGUNO = "alguno"  # OR


_ORDEN_NIVEL: Final[dict[NivelAcceso, int]] = {
    NivelAcceso.NINGUNA: 0,
    NivelAcceso.PROPIAS: 1,
    NivelAcceso.TODAS: 2,
}


def componer_accesos(
    resultados: Iterable[ResultadoAcceso], modo: ModoComposicion
) -> ResultadoAcceso:
    """
    Combina decisiones de gestión y de usuario asistido.

      - TODOS: todas deben conceder; el nivel es el más restrictivo.
      - ALGUNO: basta una; el nivel es el más permisivo.
    """
    lista = list(resultados)
    if not lista:
        raise ValueError("componer_accesos requiere al menos un resultado")

    concedidos = [r for r in lista if r.tiene_acceso]
    denegados = [r for r in lista if not r.tiene_acceso]

    if ModoComposicion(modo) is ModoComposicion.TODOS:
        if denegados:
            return denegados[0]
        return min(concedidos, key=lambda r: _ORDEN_NIVEL[r.nivel_acceso])

    if not concedidos:
        return denegados[0]
    return max(concedidos, key=lambda r: _ORDEN_NIVEL[r.nivel_acceso])
