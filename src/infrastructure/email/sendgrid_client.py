"""SendGrid v3 mail client over httpx."""

import httpx
import structlog

from infrastructure.email.provider import EmailDeliveryResult, InvitationEmail
from infrastructure.email.templates import invitation_html, invitation_subject, invitation_text

logger = structlog.get_logger()


class SendGridEmailSender:
    """Sends invitation emails through ``POST /v3/mail/send``.

    Without an API key the sender runs in demo mode: nothing leaves the
    process and the result is reported as ``demo``.
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        api_url: str = "https://api.sendgrid.com/v3/mail/send",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key.strip()
        self._from_email = from_email
        self._from_name = from_name
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    @property
    def is_demo(self) -> bool:
        return not self._api_key

    async def send_invitation(self, email: InvitationEmail) -> EmailDeliveryResult:
        if self.is_demo:
            logger.info("invitation_email_demo", recipient=email.recipient_email)
            return EmailDeliveryResult(sent=False, demo=True)

        payload = {
            "personalizations": [
                {
                    "to": [{"email": email.recipient_email, "name": email.recipient_name}],
                    "subject": invitation_subject(email),
                }
            ],
            "from": {"email": self._from_email, "name": self._from_name},
            "content": [
                {"type": "text/plain", "value": invitation_text(email)},
                {"type": "text/html", "value": invitation_html(email)},
            ],
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            logger.warning(
                "invitation_email_failed",
                recipient=email.recipient_email,
                error=str(e),
                error_type=type(e).__name__,
            )
            return EmailDeliveryResult(sent=False, error=f"Email delivery failed: {e}")

        if response.status_code >= 300:
            logger.warning(
                "invitation_email_rejected",
                recipient=email.recipient_email,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return EmailDeliveryResult(
                sent=False,
                error=f"SendGrid API error: {response.status_code}",
            )

        logger.info("invitation_email_sent", recipient=email.recipient_email)
        return EmailDeliveryResult(sent=True)
