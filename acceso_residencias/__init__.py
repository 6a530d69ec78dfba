"""
acceso_residencias: evaluación de acceso privilegiado y delegado para
residencias (roles, permisos de gestión de asistentes y usuarios asistidos).
"""

__version__ = "0.1.0"
