"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the profile-store contract consumed by the authorization use cases.
- Keep the access core independent from the storage backend.

Collaborators
- domain.usuarios: Usuario
- infrastructure.repositories: in_memory_* implementation
- application.autorizacion: loads full assistant profiles through this port

Constraints
- Pure interfaces only: no side effects, no infrastructure imports.
- Implementations MUST match method signatures exactly.
"""

from typing import Optional, Protocol

from .usuarios import Usuario


class UsuarioRepository(Protocol):
    """
    R: Interface for reading user profiles.

    Implementations must:
      - return None when the user document does not exist
      - raise on backend failures (the caller decides how to deny)
    """

    async def obtener_usuario(self, usuario_id: str) -> Optional[Usuario]:
        """R: Fetch the full user profile (roles, residence, assistant profile)."""
        ...
