"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (settings without .env)
  - Provide stub time-window validators (fixed result / failing)
  - Provide user factories (master, privileged, assistant)

Collaborators:
  - pytest / pytest-asyncio
  - acceso_residencias.domain: Usuario, PerfilAsistente, PermisoAsistente

Notes:
  - Fixtures are auto-discovered by pytest
  - Validators are stubs: the date arithmetic has its own tests
"""

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")

from acceso_residencias.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from acceso_residencias.domain.usuarios import (  # noqa: E402
    LlavePermisoGestion,
    NivelAcceso,
    PerfilAsistente,
    PermisoAsistente,
    RolUsuario,
    Usuario,
)

RESIDENCIA = "R1"
OTRA_RESIDENCIA = "R2"
ZONA_HORARIA = "America/Tegucigalpa"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Validator stubs
# ============================================================================


class ValidadorFijo:
    """Validator stub: always returns the same result and records its calls."""

    def __init__(self, resultado: str) -> None:
        self.resultado = resultado
        self.llamadas: list[tuple] = []

    async def __call__(self, fecha_inicio, fecha_fin, zona_horaria):
        self.llamadas.append((fecha_inicio, fecha_fin, zona_horaria))
        return self.resultado


class ValidadorQueFalla:
    """Validator stub that raises (corrupt data / infrastructure failure)."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.llamadas = 0

    async def __call__(self, fecha_inicio, fecha_fin, zona_horaria):
        self.llamadas += 1
        raise self.exc


@pytest.fixture
def crear_validador() -> Callable[[str], ValidadorFijo]:
    return ValidadorFijo


@pytest.fixture
def validador_dentro() -> ValidadorFijo:
    return ValidadorFijo("dentro")


@pytest.fixture
def validador_fuera() -> ValidadorFijo:
    return ValidadorFijo("fuera posterior")


@pytest.fixture
def validador_que_falla() -> ValidadorQueFalla:
    return ValidadorQueFalla(RuntimeError("fecha corrupta"))


# ============================================================================
# User factories
# ============================================================================


@pytest.fixture
def permiso_permanente() -> Callable[[NivelAcceso], PermisoAsistente]:
    def _crear(nivel: NivelAcceso = NivelAcceso.PROPIAS) -> PermisoAsistente:
        return PermisoAsistente(nivel_acceso=nivel)

    return _crear


@pytest.fixture
def permiso_temporal() -> Callable[..., PermisoAsistente]:
    def _crear(
        nivel: NivelAcceso = NivelAcceso.PROPIAS,
        fecha_inicio: str = "2025-01-01",
        fecha_fin: str = "2025-01-31",
    ) -> PermisoAsistente:
        return PermisoAsistente(
            nivel_acceso=nivel, fecha_inicio=fecha_inicio, fecha_fin=fecha_fin
        )

    return _crear


@pytest.fixture
def crear_asistente() -> Callable[..., Usuario]:
    def _crear(
        permisos: dict | None = None,
        usuarios_asistidos: dict | None = None,
        residencia_id: str = RESIDENCIA,
        usuario_id: str = "asistente-1",
    ) -> Usuario:
        return Usuario(
            id=usuario_id,
            roles=[RolUsuario.ASISTENTE],
            residencia_id=residencia_id,
            asistente=PerfilAsistente(
                permisos=permisos or {},
                usuarios_asistidos=usuarios_asistidos,
            ),
        )

    return _crear


@pytest.fixture
def usuario_master() -> Usuario:
    return Usuario(id="master-1", roles=[RolUsuario.MASTER])


@pytest.fixture
def usuario_director() -> Usuario:
    return Usuario(id="director-1", roles=[RolUsuario.DIRECTOR], residencia_id=RESIDENCIA)


@pytest.fixture
def llave_comedores() -> LlavePermisoGestion:
    return LlavePermisoGestion.GESTION_COMEDORES
