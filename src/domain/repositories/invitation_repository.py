"""Invitation repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation, InvitationStatus


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        ...

    async def get_all(self) -> list[Invitation]:
        """Get every invitation, newest first."""
        ...

    async def get_sent_by(self, inviter_id: UUID) -> list[Invitation]:
        """Get invitations created by a user, newest first."""
        ...

    async def respond(
        self, id: UUID, status: InvitationStatus, responded_at: datetime
    ) -> Invitation | None:
        """Set the response status only if the invitation is still pending.

        Returns None when another response already landed.
        """
        ...

    async def rotate_token(
        self, id: UUID, token_hash: str, expires_at: datetime
    ) -> Invitation:
        """Replace the token hash and restart the expiry window."""
        ...
