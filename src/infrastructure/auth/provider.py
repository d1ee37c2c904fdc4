"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """Caller identity extracted from a bearer token.

    Carries identity only. The caller's platform role (admin, owner, user)
    is loaded from the users table by the services, never from the token.
    """

    id: UUID
    email: str
    display_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.email


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """Create an authentication token for a user."""
        ...
