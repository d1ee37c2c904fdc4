"""Email delivery protocol."""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class InvitationEmail:
    """Everything needed to render and send one invitation email."""

    recipient_email: str
    recipient_name: str
    inviter_name: str
    invitation_type: str
    response_url: str
    accept_url: str
    decline_url: str
    personal_message: str | None = None
    expiry_days: int = 7


@dataclass
class EmailDeliveryResult:
    """Outcome of a best-effort send. Never raised, always returned."""

    sent: bool
    demo: bool = False
    error: str | None = None


class IEmailSender(Protocol):
    """Protocol for transactional email delivery."""

    async def send_invitation(self, email: InvitationEmail) -> EmailDeliveryResult:
        """Send an invitation email. Must not raise for delivery failures."""
        ...
