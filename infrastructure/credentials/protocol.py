"""CredentialVerifier protocol: the login flow depends on this, not on a user store.

Password storage and comparison live outside this service; the composition
root injects whatever implementation the deployment uses.
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    name: Optional[str] = None
    username: Optional[str] = None


class CredentialVerifier(Protocol):
    async def verify(
        self, identity: str, credential: str
    ) -> Optional[AuthenticatedUser]:
        """Return the user on a match, ``None`` on a wrong identity or password."""
        ...
