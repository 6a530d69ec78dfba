"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del núcleo de acceso)

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Mantener estable el "surface area" del dominio.

Reglas:
    - Solo re-exporta contratos/modelos/evaluadores del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .acceso_privilegiado import (
    PoliticaFalloVentana,
    ResultadoAcceso,
    normalizar_llave_permiso,
    verificar_permiso_gestion,
    verificar_permiso_usuario_asistido,
)
from .repositories import UsuarioRepository
from .usuarios import (
    ROL_ASISTENTE,
    ROL_UNIVERSAL,
    ROLES_PRIVILEGIADOS,
    ClaveReservadaAsistente,
    LlavePermisoGestion,
    NivelAcceso,
    PerfilAsistente,
    PermisoAsistente,
    RolUsuario,
    Usuario,
)
from .ventana_tiempo import (
    ResultadoVentana,
    ValidadorVentanaResidencia,
    ValidadorVentanaTiempo,
    comparar_con_ventana,
    hoy_estamos_entre_fechas_residencia,
)

__all__ = [
    # Modelos
    "RolUsuario",
    "NivelAcceso",
    "LlavePermisoGestion",
    "ClaveReservadaAsistente",
    "PermisoAsistente",
    "PerfilAsistente",
    "Usuario",
    "ROL_UNIVERSAL",
    "ROLES_PRIVILEGIADOS",
    "ROL_ASISTENTE",
    # Evaluadores
    "ResultadoAcceso",
    "PoliticaFalloVentana",
    "normalizar_llave_permiso",
    "verificar_permiso_gestion",
    "verificar_permiso_usuario_asistido",
    # Ventana de tiempo
    "ResultadoVentana",
    "ValidadorVentanaTiempo",
    "ValidadorVentanaResidencia",
    "comparar_con_ventana",
    "hoy_estamos_entre_fechas_residencia",
    # Puertos
    "UsuarioRepository",
]
