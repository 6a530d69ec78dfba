"""
===============================================================================
TARJETA CRC — domain/ventana_tiempo.py
===============================================================================

Módulo:
    Validador de Ventana de Tiempo (fechas de vigencia de un permiso)

Responsabilidades:
    - Definir el contrato async del validador (ValidadorVentanaTiempo).
    - Comparar "hoy" (en la zona horaria de la residencia) contra un rango
      [fecha_inicio, fecha_fin], inclusivo en ambos extremos.
    - Proveer una implementación por defecto con reloj inyectable.

Colaboradores:
    - domain/acceso_privilegiado.py: solo considera válido el resultado "dentro".
    - crosscutting/exceptions.py: ZonaHorariaInvalidaError.

Reglas:
    - Fechas aceptadas: "YYYY-MM-DD", "YYYY-MM-DD HH:mm[:ss]" o ISO con "T";
      solo se compara la fecha calendario.
    - Fechas ausentes, malformadas o invertidas => "error" (nunca "dentro").
    - Zona horaria desconocida => excepción (falla de infraestructura/datos,
      no un resultado de comparación).
===============================================================================
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..crosscutting.exceptions import ZonaHorariaInvalidaError

_FECHA_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ T]\d{2}:\d{2}(?::\d{2})?.*)?$")


class ResultadoVentana(str, Enum):
    """Resultado de comparar hoy contra la ventana de un permiso."""

    DENTRO = "dentro"
    FUERA_ANTERIOR = "fuera anterior"
    FUERA_POSTERIOR = "fuera posterior"
    ERROR = "error"


class ValidadorVentanaTiempo(Protocol):
    """Contrato del validador consumido por los evaluadores de acceso."""

    async def __call__(
        self,
        fecha_inicio: str | None,
        fecha_fin: str | None,
        zona_horaria: str,
    ) -> str: ...


def parsear_fecha(valor: str | date | None) -> date | None:
    """Convierte una fecha ISO (con o sin hora) a date. None si no es válida."""
    if valor is None:
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if not isinstance(valor, str):
        return None

    match = _FECHA_RE.match(valor.strip())
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def comparar_con_ventana(
    hoy: date,
    fecha_inicio: str | date | None,
    fecha_fin: str | date | None,
) -> ResultadoVentana:
    """Ubica `hoy` respecto de [fecha_inicio, fecha_fin] (inclusivo)."""
    inicio = parsear_fecha(fecha_inicio)
    fin = parsear_fecha(fecha_fin)
    if inicio is None or fin is None or inicio > fin:
        return ResultadoVentana.ERROR

    if hoy < inicio:
        return ResultadoVentana.FUERA_ANTERIOR
    if hoy > fin:
        return ResultadoVentana.FUERA_POSTERIOR
    return ResultadoVentana.DENTRO


def _ahora_utc() -> datetime:
    return datetime.now(timezone.utc)


def resolver_zona_horaria(zona_horaria: str) -> ZoneInfo:
    """ZoneInfo para un identificador IANA o ZonaHorariaInvalidaError."""
    try:
        return ZoneInfo(zona_horaria)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as exc:
        raise ZonaHorariaInvalidaError(
            f"Zona horaria inválida: {zona_horaria!r}", original_error=exc
        ) from exc


class ValidadorVentanaResidencia:
    """
    Implementación por defecto del validador.

    El reloj es inyectable: en producción es la hora del servidor (UTC),
    en tests un instante fijo.
    """

    def __init__(self, reloj: Callable[[], datetime] | None = None) -> None:
        self._reloj = reloj or _ahora_utc

    def hoy_en(self, zona_horaria: str) -> date:
        zona = resolver_zona_horaria(zona_horaria)
        ahora = self._reloj()
        if ahora.tzinfo is None:
            ahora = ahora.replace(tzinfo=timezone.utc)
        return ahora.astimezone(zona).date()

    async def __call__(
        self,
        fecha_inicio: str | None,
        fecha_fin: str | None,
        zona_horaria: str,
    ) -> ResultadoVentana:
        return comparar_con_ventana(self.hoy_en(zona_horaria), fecha_inicio, fecha_fin)


async def hoy_estamos_entre_fechas_residencia(
    fecha_inicio: str | None,
    fecha_fin: str | None,
    zona_horaria: str,
    *,
    ahora: datetime | None = None,
) -> ResultadoVentana:
    """Atajo funcional sobre ValidadorVentanaResidencia."""
    reloj = (lambda: ahora) if ahora is not None else None
    return await ValidadorVentanaResidencia(reloj)(fecha_inicio, fecha_fin, zona_horaria)
