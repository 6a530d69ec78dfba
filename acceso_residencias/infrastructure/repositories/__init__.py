"""
Implementaciones de repositorios (in-memory para tests / local dev).
"""

from .in_memory_usuario_repo import InMemoryUsuarioRepository

__all__ = ["InMemoryUsuarioRepository"]
