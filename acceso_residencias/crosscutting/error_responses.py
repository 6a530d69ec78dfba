# acceso_residencias/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Errores HTTP de las guardas de acceso (RFC 7807)
===============================================================================

CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + app_exception_handler

Responsabilidades:
  - Catálogo cerrado de códigos que puede devolver una guarda (ErrorCode)
  - Payload problem+json (ErrorDetail)
  - Factories para sin sesión (401), denegado (403), falla interna (500) y
    repositorio de perfiles ausente (503)

Colaboradores:
  - interfaces/api/http/dependencies.py
===============================================================================
"""

from __future__ import annotations

from enum import Enum

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_TITULOS: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: "Sesión requerida",
    ErrorCode.FORBIDDEN: "Acceso denegado",
    ErrorCode.INTERNAL_ERROR: "Error interno",
    ErrorCode.SERVICE_UNAVAILABLE: "Servicio no disponible",
}


class ErrorDetail(BaseModel):
    """Problem Details con `code` estable y `request_id` para correlación."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    request_id: str | None = None


class AppHTTPException(HTTPException):
    """HTTPException que lleva su ErrorCode."""

    def __init__(self, status_code: int, code: ErrorCode, detail: str):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


def unauthorized(detail: str = "Autenticación requerida") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Acceso denegado") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def internal_error(detail: str = "No se pudo evaluar el acceso") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


def service_unavailable(servicio: str) -> AppHTTPException:
    return AppHTTPException(
        503,
        ErrorCode.SERVICE_UNAVAILABLE,
        f"Servicio no disponible temporalmente: {servicio}",
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    problema = ErrorDetail(
        type=f"about:blank/{exc.code.value.lower()}",
        title=_TITULOS[exc.code],
        status=exc.status_code,
        detail=str(exc.detail),
        code=exc.code,
        instance=request.url.path,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problema.model_dump(mode="json", exclude_none=True),
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )
