# acceso_residencias/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger estructurado (JSON) de decisiones de acceso
===============================================================================

Cada decisión (DEBUG), falla del validador de ventana (WARNING) o falla de
lectura de perfil (ERROR) sale como una línea JSON con:
  - el actor y la residencia de la evaluación en curso (context.py)
  - los campos `extra` del llamador (regla, llave_permiso, error_code, ...)
  - el stacktrace cuando hay excepción

CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  JSONFormatter + setup_logger()

Responsabilidades:
  - Serializar LogRecord a JSON
  - Redactar credenciales de sesión que lleguen como extra
  - Respetar log_level / log_json de Settings

Colaboradores:
  - acceso_residencias/context.py
  - crosscutting/config.py
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from ..context import get_context_dict

# Atributos estándar del LogRecord: todo lo demás vino por `extra`.
_ATRIBUTOS_RECORD: frozenset[str] = frozenset(
    vars(logging.makeLogRecord({}))
) | {"message", "asctime", "taskName"}

_CLAVES_SENSIBLES: frozenset[str] = frozenset(
    {"token", "id_token", "authorization", "cookie", "session_cookie", "password", "secret"}
)
_REDACTADO = "***REDACTADO***"
_MAX_PROFUNDIDAD = 4


def _redactar(valor: Any, clave: str | None = None, profundidad: int = 0) -> Any:
    if clave is not None and clave.lower() in _CLAVES_SENSIBLES:
        return _REDACTADO
    if profundidad >= _MAX_PROFUNDIDAD:
        return str(valor)
    if isinstance(valor, dict):
        return {
            str(k): _redactar(v, str(k), profundidad + 1) for k, v in valor.items()
        }
    if isinstance(valor, (list, tuple, set, frozenset)):
        return [_redactar(v, clave, profundidad + 1) for v in valor]
    return valor


class JSONFormatter(logging.Formatter):
    """LogRecord -> una línea JSON enriquecida con el contexto de acceso."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "origen": f"{record.module}.{record.funcName}:{record.lineno}",
            **get_context_dict(),
        }

        for clave, valor in vars(record).items():
            if clave not in _ATRIBUTOS_RECORD:
                payload[clave] = _redactar(valor, clave)

        if record.exc_info and record.exc_info[0] is not None:
            tipo, exc, tb = record.exc_info
            payload["exception"] = {
                "type": tipo.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(tipo, exc, tb),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(name: str = "acceso-residencias") -> logging.Logger:
    """Logger del paquete; idempotente ante reimportaciones."""
    from .config import get_settings

    settings = get_settings()

    log = logging.getLogger(name)
    log.setLevel(settings.log_level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if settings.log_json
            else logging.Formatter("%(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
