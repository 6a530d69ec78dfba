"""
===============================================================================
TARJETA CRC — domain/acceso_privilegiado.py
===============================================================================

Módulo:
    Evaluadores de Acceso Privilegiado (gestión + usuarios asistidos)

Responsabilidades:
    - verificar_permiso_gestion: decidir si un usuario puede gestionar una
      clase de recurso en una residencia, y con qué alcance (Todas/Propias).
    - verificar_permiso_usuario_asistido: decidir si un asistente puede
      actuar en nombre de un usuario concreto.
    - Aplicar la política de falla del validador de ventana de tiempo.

Colaboradores:
    - domain/usuarios.py: Usuario, PerfilAsistente, PermisoAsistente.
    - domain/ventana_tiempo.py: validador de vigencia (único punto async).
    - crosscutting/config.py: política de falla por defecto.
    - crosscutting/logger.py: logs estructurados de decisiones.

Reglas (intención):
    - master accede a todo, en cualquier residencia.
    - admin/director acceden a todo, solo en su residencia.
    - asistente accede según su permiso delegado, solo en su residencia,
      y solo mientras el permiso esté vigente.
    - Cualquier otro caso: denegado. Denegar NO es una excepción.
    - Ambos evaluadores son independientes: combinar es tarea del caller.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import LlavePermisoInvalidaError, VentanaTiempoError
from ..crosscutting.logger import logger
from .usuarios import (
    ROL_ASISTENTE,
    ROL_UNIVERSAL,
    ROLES_PRIVILEGIADOS,
    ClaveReservadaAsistente,
    LlavePermisoGestion,
    NivelAcceso,
    PermisoAsistente,
    Usuario,
)
from .ventana_tiempo import (
    ResultadoVentana,
    ValidadorVentanaResidencia,
    ValidadorVentanaTiempo,
)

_MSG_DENEGADO_DEFECTO: Final[str] = "Acceso denegado por defecto."
_MSG_ERROR_VENTANA: Final[str] = "Error validando la ventana de tiempo."


class PoliticaFalloVentana(str, Enum):
    """Qué hacer cuando el validador de ventana de tiempo falla."""

    DENEGAR = "denegar"
    PROPAGAR = "propagar"


@dataclass(frozen=True, slots=True)
class ResultadoAcceso:
    """
    Decisión de acceso (transitoria, nunca cacheada).

    Invariantes:
      - tiene_acceso False => nivel_acceso Ninguna
      - nivel_acceso distinto de Ninguna => tiene_acceso True
    """

    tiene_acceso: bool
    nivel_acceso: NivelAcceso
    error: str | None = None

    def __post_init__(self) -> None:
        if self.tiene_acceso != (self.nivel_acceso != NivelAcceso.NINGUNA):
            raise ValueError(
                "ResultadoAcceso inconsistente: "
                f"tiene_acceso={self.tiene_acceso}, nivel_acceso={self.nivel_acceso}"
            )

    @classmethod
    def concedido(cls, nivel: NivelAcceso) -> "ResultadoAcceso":
        return cls(tiene_acceso=True, nivel_acceso=NivelAcceso(nivel))

    @classmethod
    def denegado(cls, error: str | None = None) -> "ResultadoAcceso":
        return cls(tiene_acceso=False, nivel_acceso=NivelAcceso.NINGUNA, error=error)


def normalizar_llave_permiso(llave: LlavePermisoGestion | str) -> LlavePermisoGestion:
    """Acepta el enum o su valor string; rechaza claves reservadas y desconocidas."""
    if isinstance(llave, LlavePermisoGestion):
        return llave
    try:
        return LlavePermisoGestion(llave)
    except ValueError:
        if llave in {c.value for c in ClaveReservadaAsistente}:
            raise LlavePermisoInvalidaError(
                f"'{llave}' es una clave reservada del asistente, no un permiso de gestión"
            ) from None
        raise LlavePermisoInvalidaError(
            f"Llave de permiso desconocida: {llave!r}"
        ) from None


def _resolver_politica(
    politica: PoliticaFalloVentana | str | None,
) -> PoliticaFalloVentana:
    if politica is None:
        politica = get_settings().politica_fallo_ventana
    return PoliticaFalloVentana(politica)


async def _resolver_permiso(
    permiso: PermisoAsistente | None,
    zona_horaria: str,
    validador: ValidadorVentanaTiempo,
    politica: PoliticaFalloVentana,
) -> ResultadoAcceso | None:
    """
    Evalúa una concesión delegada.

    Retorna:
      - ResultadoAcceso concedido si el permiso está vigente
      - ResultadoAcceso denegado (con error) si el validador falló y la
        política es DENEGAR
      - None si el permiso no aplica (ausente, Ninguna o fuera de plazo)
    """
    if permiso is None or not permiso.es_efectivo:
        return None

    if permiso.es_permanente:
        return ResultadoAcceso.concedido(permiso.nivel_acceso)

    try:
        resultado = await validador(
            permiso.fecha_inicio, permiso.fecha_fin, zona_horaria
        )
    except Exception as exc:
        if politica is PoliticaFalloVentana.PROPAGAR:
            if isinstance(exc, VentanaTiempoError):
                raise
            raise VentanaTiempoError(
                "Falló la validación de la ventana de tiempo", original_error=exc
            ) from exc
        logger.warning(
            "Validación de ventana de tiempo falló; se deniega el acceso",
            exc_info=True,
            extra={
                "fecha_inicio": permiso.fecha_inicio,
                "fecha_fin": permiso.fecha_fin,
                "zona_horaria": zona_horaria,
            },
        )
        return ResultadoAcceso.denegado(_MSG_ERROR_VENTANA)

    if resultado == ResultadoVentana.DENTRO:
        return ResultadoAcceso.concedido(permiso.nivel_acceso)
    return None


def _log_decision(regla: str, resultado: ResultadoAcceso, **extra: object) -> None:
    logger.debug(
        "Decisión de acceso",
        extra={
            "regla": regla,
            "tiene_acceso": resultado.tiene_acceso,
            "nivel_acceso": resultado.nivel_acceso.value,
            **extra,
        },
    )


async def verificar_permiso_gestion(
    usuario: Usuario,
    residencia_id: str,
    llave_permiso: LlavePermisoGestion | str,
    zona_horaria: str,
    *,
    validador: ValidadorVentanaTiempo | None = None,
    politica_fallo: PoliticaFalloVentana | str | None = None,
) -> ResultadoAcceso:
    """
    Verifica si un usuario puede gestionar una clase de recurso en una residencia.

    Orden estricto (gana la primera regla que aplica):
      1. master => Todas (ignora la residencia).
      2. admin/director de esa residencia => Todas.
      3. asistente de esa residencia con permiso vigente para la llave
         => nivel del permiso.
      4. Denegado por defecto.
    """
    llave = normalizar_llave_permiso(llave_permiso)
    contexto = {"llave_permiso": llave.value, "residencia_objetivo": residencia_id}

    if usuario.tiene_rol(ROL_UNIVERSAL):
        resultado = ResultadoAcceso.concedido(NivelAcceso.TODAS)
        _log_decision("rol_universal", resultado, **contexto)
        return resultado

    if usuario.tiene_algun_rol(ROLES_PRIVILEGIADOS) and usuario.pertenece_a(
        residencia_id
    ):
        resultado = ResultadoAcceso.concedido(NivelAcceso.TODAS)
        _log_decision("rol_privilegiado", resultado, **contexto)
        return resultado

    if (
        usuario.tiene_rol(ROL_ASISTENTE)
        and usuario.asistente is not None
        and usuario.pertenece_a(residencia_id)
    ):
        resultado = await _resolver_permiso(
            usuario.asistente.permiso_para(llave),
            zona_horaria,
            validador or ValidadorVentanaResidencia(),
            _resolver_politica(politica_fallo),
        )
        if resultado is not None:
            _log_decision("asistente", resultado, **contexto)
            return resultado

    resultado = ResultadoAcceso.denegado(_MSG_DENEGADO_DEFECTO)
    _log_decision("defecto", resultado, **contexto)
    return resultado


async def verificar_permiso_usuario_asistido(
    usuario_asistente: Usuario,
    id_usuario_asistido: str,
    zona_horaria: str,
    *,
    validador: ValidadorVentanaTiempo | None = None,
    politica_fallo: PoliticaFalloVentana | str | None = None,
) -> ResultadoAcceso:
    """
    Verifica si un asistente puede actuar en nombre de un usuario específico.

    No depende de los permisos de gestión: tener uno no implica el otro.
    """
    contexto = {"usuario_asistido": id_usuario_asistido}
    perfil = usuario_asistente.asistente

    if (
        not usuario_asistente.tiene_rol(ROL_ASISTENTE)
        or perfil is None
        or perfil.usuarios_asistidos is None
    ):
        resultado = ResultadoAcceso.denegado()
        _log_decision("sin_perfil_asistente", resultado, **contexto)
        return resultado

    resultado = await _resolver_permiso(
        perfil.permiso_para_usuario(id_usuario_asistido),
        zona_horaria,
        validador or ValidadorVentanaResidencia(),
        _resolver_politica(politica_fallo),
    )
    if resultado is None:
        resultado = ResultadoAcceso.denegado()

    _log_decision("usuario_asistido", resultado, **contexto)
    return resultado
