"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory_usuario_repo.py
============================================================
Class: InMemoryUsuarioRepository

Responsibilities:
  - Almacenar perfiles de usuario en memoria (tests / local dev).
  - Implementar el contrato UsuarioRepository (lectura async).
  - Exponer guardar/eliminar para preparar escenarios.

Collaborators:
  - domain.repositories.UsuarioRepository (contrato)
  - domain.usuarios.Usuario

Constraints / Notes:
  - Thread-safe: Lock protege el diccionario interno.
  - Repo puro: NO decide acceso, sólo persiste/retorna datos.
  - Usuario es inmutable: no hacen falta copias defensivas.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, Optional

from ...domain.repositories import UsuarioRepository
from ...domain.usuarios import Usuario


class InMemoryUsuarioRepository(UsuarioRepository):
    """Repositorio in-memory de perfiles: usuario_id -> Usuario."""

    def __init__(self, usuarios: Iterable[Usuario] = ()) -> None:
        self._lock = Lock()
        self._usuarios: Dict[str, Usuario] = {}
        for usuario in usuarios:
            self.guardar(usuario)

    def guardar(self, usuario: Usuario) -> None:
        if not usuario.id:
            raise ValueError("El usuario debe tener id para guardarse")
        with self._lock:
            self._usuarios[usuario.id] = usuario

    def eliminar(self, usuario_id: str) -> None:
        with self._lock:
            self._usuarios.pop(usuario_id, None)

    async def obtener_usuario(self, usuario_id: str) -> Optional[Usuario]:
        with self._lock:
            return self._usuarios.get(usuario_id)
