"""
===============================================================================
TARJETA CRC — acceso_residencias/context.py (Contexto por evaluación)
===============================================================================

Responsabilidades:
  - Mantener contexto "request-scoped" usando ContextVars (async-safe).
  - Permitir correlacionar logs de decisiones de acceso (quién, dónde)
    sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), clear_context().

Colaboradores:
  - crosscutting.logger: enriquece logs leyendo get_context_dict().
  - interfaces.api.http.dependencies: setea usuario/residencia del request.
  - application.autorizacion: setea contexto antes de evaluar.

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

# Identificador de request (idealmente UUID o ID estable).
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Actor y residencia sobre la que se evalúa el acceso.
usuario_id_var: ContextVar[str] = ContextVar("usuario_id", default="")
residencia_id_var: ContextVar[str] = ContextVar("residencia_id", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_USUARIO_ID: Final[str] = "usuario_id"
_CTX_RESIDENCIA_ID: Final[str] = "residencia_id"


def set_request_context(*, request_id: str = "") -> None:
    """Setea el identificador del request. String vacío = no disponible."""
    request_id_var.set(request_id or "")


def set_acceso_context(*, usuario_id: str = "", residencia_id: str = "") -> None:
    """
    Setea el actor y la residencia de la evaluación en curso.

    Regla:
      - Strings vacíos significan "no disponible".
    """
    usuario_id_var.set(usuario_id or "")
    residencia_id_var.set(residencia_id or "")


def get_context_dict() -> dict[str, str]:
    """Devuelve el contexto actual como dict, omitiendo claves vacías."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := usuario_id_var.get():
        ctx[_CTX_USUARIO_ID] = val
    if val := residencia_id_var.get():
        ctx[_CTX_RESIDENCIA_ID] = val

    return ctx


def clear_context() -> None:
    """Limpia el contexto al final del request."""
    request_id_var.set("")
    usuario_id_var.set("")
    residencia_id_var.set("")
