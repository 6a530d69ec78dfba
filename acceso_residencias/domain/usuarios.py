"""
===============================================================================
TARJETA CRC — domain/usuarios.py
===============================================================================

Módulo:
    Modelos de Usuario, Roles y Permisos delegados (asistentes)

Responsabilidades:
    - Definir el catálogo cerrado de roles (RolUsuario) y niveles de acceso.
    - Definir el catálogo cerrado de llaves de permiso de gestión
      (LlavePermisoGestion) y, aparte, las claves reservadas del perfil de
      asistente (ClaveReservadaAsistente).
    - Definir las "shapes" inmutables: PermisoAsistente, PerfilAsistente, Usuario.

Colaboradores:
    - domain/acceso_privilegiado.py: evalúa acceso sobre estos modelos.
    - interfaces/esquemas.py: parsea documentos almacenados -> estos modelos.

Notas:
    - Si `roles` no viene, se considera vacío (invariante explícito del
      constructor de Usuario, no un truco de coalescencia).
    - Las claves reservadas nunca son llaves de permiso: son otro tipo.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class RolUsuario(str, Enum):
    """Roles soportados por la plataforma."""

    MASTER = "master"
    ADMIN = "admin"
    DIRECTOR = "director"
    RESIDENTE = "residente"
    INVITADO = "invitado"
    ASISTENTE = "asistente"
    CONTADOR = "contador"


# Rol con acceso universal (sin importar la residencia).
ROL_UNIVERSAL: RolUsuario = RolUsuario.MASTER

# Roles con acceso total, pero solo dentro de su residencia.
ROLES_PRIVILEGIADOS: frozenset[RolUsuario] = frozenset(
    {RolUsuario.ADMIN, RolUsuario.DIRECTOR}
)

# Rol que recibe autoridad delegada.
ROL_ASISTENTE: RolUsuario = RolUsuario.ASISTENTE


class NivelAcceso(str, Enum):
    """Alcance de registros sobre los que se puede actuar."""

    TODAS = "Todas"
    PROPIAS = "Propias"
    NINGUNA = "Ninguna"


class LlavePermisoGestion(str, Enum):
    """Clases de recurso gestionables (una entrada por permiso de asistente)."""

    GESTION_ACTIVIDADES = "gestionActividades"
    GESTION_INVITADOS = "gestionInvitados"
    GESTION_RECORDATORIOS = "gestionRecordatorios"
    GESTION_DIETAS = "gestionDietas"
    GESTION_ATENCIONES = "gestionAtenciones"
    GESTION_ASISTENTES = "gestionAsistentes"
    GESTION_GRUPOS = "gestionGrupos"
    GESTION_HORARIOS_Y_ALTERACIONES = "gestionHorariosYAlteraciones"
    GESTION_COMEDORES = "gestionComedores"
    SOLICITAR_COMENSALES = "solicitarComensales"


class ClaveReservadaAsistente(str, Enum):
    """Claves del perfil de asistente que NO son permisos de gestión."""

    USUARIOS_ASISTIDOS = "usuariosAsistidos"
    APROBADOR_ID = "aprobadorId"


@dataclass(frozen=True, slots=True)
class PermisoAsistente:
    """
    Concesión delegada: nivel de acceso + ventana de validez opcional.

    Sin restricción de tiempo => permanente.
    Con restricción => válida solo mientras "hoy" esté dentro de
    [fecha_inicio, fecha_fin] en la zona horaria de la residencia.
    """

    nivel_acceso: NivelAcceso
    fecha_inicio: str | None = None
    fecha_fin: str | None = None
    restriccion_tiempo: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "nivel_acceso", NivelAcceso(self.nivel_acceso))
        # Una sola fecha ya restringe; la ventana incompleta se evalúa como error.
        if self.restriccion_tiempo is None:
            object.__setattr__(
                self,
                "restriccion_tiempo",
                self.fecha_inicio is not None or self.fecha_fin is not None,
            )

    @property
    def es_efectivo(self) -> bool:
        """Un permiso con nivel Ninguna equivale a no tener permiso."""
        return self.nivel_acceso != NivelAcceso.NINGUNA

    @property
    def es_permanente(self) -> bool:
        return not self.restriccion_tiempo


def _congelar(mapa: Mapping | None) -> Mapping | None:
    if mapa is None:
        return None
    return MappingProxyType(dict(mapa))


@dataclass(frozen=True, slots=True)
class PerfilAsistente:
    """Perfil presente solo en usuarios con rol asistente."""

    permisos: Mapping[LlavePermisoGestion, PermisoAsistente] = field(
        default_factory=dict
    )
    usuarios_asistidos: Mapping[str, PermisoAsistente] | None = None
    aprobador_id: str | None = None

    def __post_init__(self) -> None:
        permisos = {LlavePermisoGestion(k): v for k, v in self.permisos.items()}
        object.__setattr__(self, "permisos", MappingProxyType(permisos))
        object.__setattr__(
            self, "usuarios_asistidos", _congelar(self.usuarios_asistidos)
        )

    def permiso_para(self, llave: LlavePermisoGestion) -> PermisoAsistente | None:
        return self.permisos.get(llave)

    def permiso_para_usuario(self, usuario_id: str) -> PermisoAsistente | None:
        if self.usuarios_asistidos is None:
            return None
        return self.usuarios_asistidos.get(usuario_id)


@dataclass(frozen=True, slots=True, init=False)
class Usuario:
    """Actor evaluado por el núcleo de acceso."""

    id: str | None = None
    roles: frozenset[RolUsuario] = frozenset()
    residencia_id: str | None = None
    asistente: PerfilAsistente | None = None

    def __init__(
        self,
        id: str | None = None,
        roles: Iterable[RolUsuario | str] | None = None,
        residencia_id: str | None = None,
        asistente: PerfilAsistente | None = None,
    ) -> None:
        object.__setattr__(self, "id", id)
        # Roles ausentes => conjunto vacío.
        object.__setattr__(
            self, "roles", frozenset(RolUsuario(r) for r in (roles or ()))
        )
        object.__setattr__(self, "residencia_id", residencia_id)
        object.__setattr__(self, "asistente", asistente)

    def tiene_rol(self, rol: RolUsuario) -> bool:
        return rol in self.roles

    def tiene_algun_rol(self, roles: Iterable[RolUsuario]) -> bool:
        return not self.roles.isdisjoint(roles)

    def pertenece_a(self, residencia_id: str) -> bool:
        return self.residencia_id is not None and self.residencia_id == residencia_id
