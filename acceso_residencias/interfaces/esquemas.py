"""
===============================================================================
TARJETA CRC — interfaces/esquemas.py
===============================================================================

Módulo:
    Schemas de documentos de usuario y matriz de accesos del asistente

Responsabilidades:
    - Validar documentos almacenados (camelCase) antes de evaluarlos.
    - Validar el payload de actualización de la matriz de accesos.
    - Aplicar las reglas de integridad de fechas de un permiso delegado.
    - Convertir a modelos de dominio (to_domain).

Colaboradores:
    - domain.usuarios: PermisoAsistente, PerfilAsistente, Usuario, enums
    - domain.ventana_tiempo.parsear_fecha

Reglas de fechas (solo en MatrizAccesosPayload):
    - restriccionTiempo => fechaInicio y fechaFin obligatorias, fin > inicio.
    - sin restricción => ambas fechas nulas (higiene de datos).
    - Los documentos almacenados solo se validan por tipo; un permiso sin
      restricción con fechas sobrantes se lee como permanente.
===============================================================================
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.usuarios import (
    ROL_ASISTENTE,
    LlavePermisoGestion,
    NivelAcceso,
    PerfilAsistente,
    PermisoAsistente,
    RolUsuario,
    Usuario,
)
from ..domain.ventana_tiempo import parsear_fecha


class PermisoAsistenteSchema(BaseModel):
    """Detalle de un permiso delegado (nivel + vigencia)."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    nivel_acceso: NivelAcceso = Field(..., alias="nivelAcceso")
    restriccion_tiempo: bool = Field(..., alias="restriccionTiempo")
    fecha_inicio: str | None = Field(default=None, alias="fechaInicio")
    fecha_fin: str | None = Field(default=None, alias="fechaFin")

    def validar_fechas(self) -> None:
        """
        Integridad de fechas. Solo se exige al escribir la matriz: los
        documentos ya almacenados se leen tal cual.
        """
        if not self.restriccion_tiempo:
            if self.fecha_inicio is not None or self.fecha_fin is not None:
                raise ValueError("Las fechas deben ser nulas si no hay restricción.")
            return

        if self.fecha_inicio is None or self.fecha_fin is None:
            raise ValueError(
                "fechaInicio y fechaFin son obligatorias si hay restricción temporal."
            )
        inicio = parsear_fecha(self.fecha_inicio)
        fin = parsear_fecha(self.fecha_fin)
        if inicio is None or fin is None:
            raise ValueError("La fecha debe tener formato YYYY-MM-DD válido")
        if inicio >= fin:
            raise ValueError("La fecha de fin debe ser posterior al inicio.")

    def to_domain(self) -> PermisoAsistente:
        return PermisoAsistente(
            nivel_acceso=self.nivel_acceso,
            fecha_inicio=self.fecha_inicio,
            fecha_fin=self.fecha_fin,
            restriccion_tiempo=self.restriccion_tiempo,
        )


class PermisosGestionSchema(BaseModel):
    """Un permiso por cada clase de recurso gestionable."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    gestion_actividades: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_ACTIVIDADES.value
    )
    gestion_invitados: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_INVITADOS.value
    )
    gestion_recordatorios: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_RECORDATORIOS.value
    )
    gestion_dietas: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_DIETAS.value
    )
    gestion_atenciones: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_ATENCIONES.value
    )
    gestion_asistentes: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_ASISTENTES.value
    )
    gestion_grupos: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_GRUPOS.value
    )
    gestion_horarios_y_alteraciones: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_HORARIOS_Y_ALTERACIONES.value
    )
    gestion_comedores: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.GESTION_COMEDORES.value
    )
    solicitar_comensales: PermisoAsistenteSchema = Field(
        ..., alias=LlavePermisoGestion.SOLICITAR_COMENSALES.value
    )

    def permisos_domain(self) -> dict[LlavePermisoGestion, PermisoAsistente]:
        permisos: dict[LlavePermisoGestion, PermisoAsistente] = {}
        for nombre, info in PermisosGestionSchema.model_fields.items():
            permisos[LlavePermisoGestion(info.alias)] = getattr(self, nombre).to_domain()
        return permisos


class AsistenteSchema(PermisosGestionSchema):
    """Perfil completo del asistente tal como se almacena."""

    usuarios_asistidos: dict[str, PermisoAsistenteSchema] = Field(
        default_factory=dict, alias="usuariosAsistidos"
    )
    aprobador_id: str | None = Field(default=None, alias="aprobadorId")

    def to_domain(self) -> PerfilAsistente:
        return PerfilAsistente(
            permisos=self.permisos_domain(),
            usuarios_asistidos={
                usuario_id: permiso.to_domain()
                for usuario_id, permiso in self.usuarios_asistidos.items()
            },
            aprobador_id=self.aprobador_id,
        )


class UsuarioSchema(BaseModel):
    """
    Documento de usuario (solo los campos que usa el núcleo de acceso).

    El resto de campos del documento se ignoran.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    roles: list[RolUsuario] = Field(default_factory=list)
    residencia_id: str | None = Field(default=None, alias="residenciaId")
    asistente: AsistenteSchema | None = None

    @field_validator("roles", mode="before")
    @classmethod
    def roles_ausentes(cls, v: object) -> object:
        return [] if v is None else v

    @model_validator(mode="after")
    def validar_rol_asistente(self) -> "UsuarioSchema":
        es_asistente = ROL_ASISTENTE in self.roles
        if es_asistente and self.asistente is None:
            raise ValueError("Los permisos de asistente son obligatorios para este rol.")
        if not es_asistente and self.asistente is not None:
            raise ValueError(
                "Los permisos de asistente solo son aplicables a usuarios con el rol 'asistente'."
            )
        return self

    def to_domain(self) -> Usuario:
        return Usuario(
            id=self.id,
            roles=self.roles,
            residencia_id=self.residencia_id,
            asistente=self.asistente.to_domain() if self.asistente else None,
        )


class MatrizAccesosPayload(BaseModel):
    """Payload para actualizar los permisos de gestión de un asistente."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    target_user_id: str = Field(..., min_length=1, alias="targetUserId")
    permisos: PermisosGestionSchema

    @model_validator(mode="after")
    def validar_fechas_permisos(self) -> "MatrizAccesosPayload":
        for nombre, info in PermisosGestionSchema.model_fields.items():
            try:
                getattr(self.permisos, nombre).validar_fechas()
            except ValueError as exc:
                raise ValueError(f"{info.alias}: {exc}") from exc
        return self
