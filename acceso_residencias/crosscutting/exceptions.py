# acceso_residencias/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del núcleo de acceso
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message "humana" (sin filtrar datos de sesión)

Una denegación de acceso NO es una excepción: es el valor normal
ResultadoAcceso(tiene_acceso=False). Estas excepciones cubren fallas de
infraestructura o de programación.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AccesoError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - domain/ventana_tiempo.py, domain/acceso_privilegiado.py
  - application/autorizacion.py
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class AccesoError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      AccesoError

    Responsabilidades:
      - Base para errores internos del núcleo de acceso
      - Proveer error_code + error_id + message

    Colaboradores:
      - interfaces/api/http/dependencies.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "ACCESO_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class VentanaTiempoError(AccesoError):
    """Falla del validador de ventana de tiempo (no un "fuera" normal)."""

    error_code: str = "VENTANA_TIEMPO_ERROR"


class ZonaHorariaInvalidaError(VentanaTiempoError):
    """Zona horaria IANA desconocida para la residencia."""

    error_code: str = "ZONA_HORARIA_INVALIDA"


class LlavePermisoInvalidaError(AccesoError, ValueError):
    """Llave de permiso fuera del catálogo (o llave reservada del asistente)."""

    error_code: str = "LLAVE_PERMISO_INVALIDA"


class PerfilUsuarioError(AccesoError):
    """Falla al obtener el perfil del usuario desde el repositorio."""

    error_code: str = "PERFIL_USUARIO_ERROR"
