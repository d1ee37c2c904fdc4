"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.user import UserType


class InvitationStatus(StrEnum):
    """Stored status of an invitation.

    ``EXPIRED`` is never written by the service; expiry is derived from
    ``expires_at`` when a token is read.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class InvitationAction(StrEnum):
    ACCEPT = "accept"
    DECLINE = "decline"


class TokenInvalidReason(StrEnum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"


# Default invitation expiry: 7 days
INVITATION_EXPIRY_DAYS = 7


@dataclass
class Invitation:
    """Domain entity for a platform invitation."""

    email: str
    invitation_type: UserType
    token_hash: str
    invited_by: UUID
    id: UUID = field(default_factory=uuid4)
    invitee_name: str | None = None
    personal_message: str | None = None
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS)
    )
    responded_at: datetime | None = None

    def is_expired_at(self, now: datetime) -> bool:
        """Check if the invitation has expired at ``now``."""
        return now >= self.expires_at

    def effective_status(self, now: datetime) -> InvitationStatus:
        """Status as seen by readers: pending invitations past expiry read as expired."""
        if self.status == InvitationStatus.PENDING and self.is_expired_at(now):
            return InvitationStatus.EXPIRED
        return self.status


@dataclass
class TokenValidation:
    """Result of checking an invitation token without redeeming it."""

    valid: bool
    reason: TokenInvalidReason | None = None
    invitation: Invitation | None = None
