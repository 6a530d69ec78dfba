"""
Name: Authorization Use Case Tests

Responsibilities:
  - Validate actor loading from session + repository
  - Validate explicit denials when the assistant profile cannot be read
  - Validate record-level scope (Todas / Propias)
  - Validate AND / OR composition of independent decisions
"""

import logging

import pytest

from acceso_residencias.application.autorizacion import (
    ContextoSesion,
    ModoComposicion,
    VerificarPermisoGestionUseCase,
    VerificarPermisoUsuarioAsistidoUseCase,
    componer_accesos,
    puede_actuar_sobre_registro,
)
from acceso_residencias.context import clear_context, get_context_dict
from acceso_residencias.domain.acceso_privilegiado import ResultadoAcceso
from acceso_residencias.domain.usuarios import NivelAcceso, RolUsuario
from acceso_residencias.infrastructure.repositories import InMemoryUsuarioRepository

pytestmark = pytest.mark.unit

TODAS = ResultadoAcceso.concedido(NivelAcceso.TODAS)
PROPIAS = ResultadoAcceso.concedido(NivelAcceso.PROPIAS)
DENEGADO = ResultadoAcceso.denegado("Acceso denegado por defecto.")


class _RepositorioQueFalla:
    async def obtener_usuario(self, usuario_id):
        raise ConnectionError("base de datos caída")


class _RepositorioEspia:
    def __init__(self):
        self.consultas = []

    async def obtener_usuario(self, usuario_id):
        self.consultas.append(usuario_id)
        return None


@pytest.fixture(autouse=True)
def _limpiar_contexto():
    yield
    clear_context()


def _sesion_asistente(usuario_id="asistente-1", residencia_id="R1", **kwargs):
    return ContextoSesion(
        usuario_id=usuario_id,
        residencia_id=residencia_id,
        roles=[RolUsuario.ASISTENTE],
        **kwargs,
    )


class TestVerificarPermisoGestion:
    @pytest.mark.asyncio
    async def test_director_does_not_need_profile_lookup(self):
        repositorio = _RepositorioEspia()
        sesion = ContextoSesion(
            usuario_id="director-1", residencia_id="R1", roles=["director"]
        )

        resultado = await VerificarPermisoGestionUseCase(repositorio).execute(
            sesion, "gestionDietas"
        )

        assert resultado == TODAS
        assert repositorio.consultas == []

    @pytest.mark.asyncio
    async def test_target_residence_overrides_session_residence(self):
        sesion = ContextoSesion(
            usuario_id="director-1", residencia_id="R1", roles=["director"]
        )

        resultado = await VerificarPermisoGestionUseCase(
            InMemoryUsuarioRepository()
        ).execute(sesion, "gestionDietas", residencia_id="R2")

        assert resultado == DENEGADO

    @pytest.mark.asyncio
    async def test_assistant_is_evaluated_with_stored_profile(
        self, crear_asistente, permiso_permanente, llave_comedores
    ):
        repositorio = InMemoryUsuarioRepository(
            [crear_asistente(permisos={llave_comedores: permiso_permanente()})]
        )

        resultado = await VerificarPermisoGestionUseCase(repositorio).execute(
            _sesion_asistente(), llave_comedores
        )

        assert resultado == PROPIAS

    @pytest.mark.asyncio
    async def test_missing_profile_is_explicit_denial(self, llave_comedores):
        resultado = await VerificarPermisoGestionUseCase(
            InMemoryUsuarioRepository()
        ).execute(_sesion_asistente(), llave_comedores)

        assert resultado == ResultadoAcceso.denegado("Usuario asistente no encontrado.")

    @pytest.mark.asyncio
    async def test_repository_failure_is_explicit_denial(self, llave_comedores, caplog):
        with caplog.at_level(logging.ERROR, logger="acceso-residencias"):
            resultado = await VerificarPermisoGestionUseCase(
                _RepositorioQueFalla()
            ).execute(_sesion_asistente(), llave_comedores)

        assert resultado == ResultadoAcceso.denegado(
            "Error en la consulta de usuario asistente."
        )
        registro = caplog.records[-1]
        assert registro.error_code == "PERFIL_USUARIO_ERROR"
        assert registro.usuario_consultado == "asistente-1"

    @pytest.mark.asyncio
    async def test_session_timezone_is_passed_to_validator(
        self, crear_asistente, permiso_temporal, llave_comedores, validador_dentro
    ):
        repositorio = InMemoryUsuarioRepository(
            [crear_asistente(permisos={llave_comedores: permiso_temporal()})]
        )

        await VerificarPermisoGestionUseCase(repositorio, validador_dentro).execute(
            _sesion_asistente(zona_horaria="Europe/Madrid"), llave_comedores
        )

        assert validador_dentro.llamadas == [
            ("2025-01-01", "2025-01-31", "Europe/Madrid")
        ]

    @pytest.mark.asyncio
    async def test_default_timezone_comes_from_settings(
        self, crear_asistente, permiso_temporal, llave_comedores, validador_dentro
    ):
        repositorio = InMemoryUsuarioRepository(
            [crear_asistente(permisos={llave_comedores: permiso_temporal()})]
        )

        await VerificarPermisoGestionUseCase(repositorio, validador_dentro).execute(
            _sesion_asistente(), llave_comedores
        )

        assert validador_dentro.llamadas[0][2] == "America/Tegucigalpa"

    @pytest.mark.asyncio
    async def test_sets_logging_context(self):
        sesion = ContextoSesion(usuario_id="master-1", residencia_id=None, roles=["master"])

        await VerificarPermisoGestionUseCase(InMemoryUsuarioRepository()).execute(
            sesion, "gestionGrupos", residencia_id="R7"
        )

        assert get_context_dict() == {"usuario_id": "master-1", "residencia_id": "R7"}


class TestVerificarPermisoUsuarioAsistido:
    @pytest.mark.asyncio
    async def test_assistant_with_assisted_user(self, crear_asistente, permiso_permanente):
        repositorio = InMemoryUsuarioRepository(
            [
                crear_asistente(
                    usuarios_asistidos={"residente-1": permiso_permanente(NivelAcceso.TODAS)}
                )
            ]
        )
        caso_de_uso = VerificarPermisoUsuarioAsistidoUseCase(repositorio)

        assert await caso_de_uso.execute(_sesion_asistente(), "residente-1") == TODAS
        assert (
            await caso_de_uso.execute(_sesion_asistente(), "residente-2")
        ).tiene_acceso is False

    @pytest.mark.asyncio
    async def test_director_cannot_act_for_residents(self):
        sesion = ContextoSesion(
            usuario_id="director-1", residencia_id="R1", roles=["director"]
        )

        resultado = await VerificarPermisoUsuarioAsistidoUseCase(
            InMemoryUsuarioRepository()
        ).execute(sesion, "residente-1")

        assert resultado == ResultadoAcceso.denegado()

    @pytest.mark.asyncio
    async def test_repository_failure_is_explicit_denial(self):
        resultado = await VerificarPermisoUsuarioAsistidoUseCase(
            _RepositorioQueFalla()
        ).execute(_sesion_asistente(), "residente-1")

        assert resultado.error == "Error en la consulta de usuario asistente."


class TestPuedeActuarSobreRegistro:
    def test_todas_covers_any_record(self):
        assert puede_actuar_sobre_registro(TODAS, creado_por="otro", usuario_id="yo")

    def test_propias_covers_only_own_records(self):
        assert puede_actuar_sobre_registro(PROPIAS, creado_por="yo", usuario_id="yo")
        assert not puede_actuar_sobre_registro(PROPIAS, creado_por="otro", usuario_id="yo")
        assert not puede_actuar_sobre_registro(PROPIAS, creado_por=None, usuario_id="yo")

    def test_denied_covers_nothing(self):
        assert not puede_actuar_sobre_registro(DENEGADO, creado_por="yo", usuario_id="yo")


class TestComponerAccesos:
    def test_todos_requires_every_grant(self):
        assert componer_accesos([TODAS, DENEGADO], ModoComposicion.TODOS) == DENEGADO

    def test_todos_keeps_most_restrictive_level(self):
        assert componer_accesos([TODAS, PROPIAS], ModoComposicion.TODOS) == PROPIAS

    def test_alguno_keeps_most_permissive_grant(self):
        assert componer_accesos([DENEGADO, PROPIAS, TODAS], "alguno") == TODAS

    def test_alguno_without_grants_returns_first_denial(self):
        otro = ResultadoAcceso.denegado()

        assert componer_accesos([DENEGADO, otro], ModoComposicion.ALGUNO) == DENEGADO

    def test_empty_input_is_rejected(self):
        with pytest.raises(ValueError):
            componer_accesos([], ModoComposicion.TODOS)
