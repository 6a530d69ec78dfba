"""
Capa de aplicación: casos de uso de autorización para las acciones de servidor.
"""

from .autorizacion import (
    ContextoSesion,
    ModoComposicion,
    VerificarPermisoGestionUseCase,
    VerificarPermisoUsuarioAsistidoUseCase,
    componer_accesos,
    puede_actuar_sobre_registro,
)

__all__ = [
    "ContextoSesion",
    "ModoComposicion",
    "VerificarPermisoGestionUseCase",
    "VerificarPermisoUsuarioAsistidoUseCase",
    "componer_accesos",
    "puede_actuar_sobre_registro",
]
