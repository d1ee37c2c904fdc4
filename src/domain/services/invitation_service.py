"""Invitation service layer with business logic."""

import hashlib
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import NoReturn
from urllib.parse import urlencode
from uuid import UUID

import structlog

from core.exceptions import (
    AuthorizationError,
    InvitationAlreadyUsedError,
    InvitationExpiredError,
    InvitationNotFoundError,
    ValidationError,
)
from domain.entities.activity import Actions, EntityTypes
from domain.entities.invitation import (
    INVITATION_EXPIRY_DAYS,
    Invitation,
    InvitationAction,
    InvitationStatus,
    TokenInvalidReason,
    TokenValidation,
)
from domain.entities.user import User, UserType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService
from domain.services.authorization import require_user
from infrastructure.email.provider import EmailDeliveryResult, IEmailSender, InvitationEmail

logger = structlog.get_logger()

# Roles each inviter role may grant
INVITABLE_TYPES: dict[UserType, frozenset[UserType]] = {
    UserType.ADMIN: frozenset({UserType.ADMIN, UserType.OWNER, UserType.USER}),
    UserType.OWNER: frozenset({UserType.USER}),
    UserType.USER: frozenset(),
}


class InvitationService:
    """Service layer for platform invitations.

    Tokens are opaque and single-use. Only their SHA-256 hash is stored;
    the raw token is handed back once, at creation or re-send.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        email_sender: IEmailSender,
        public_base_url: str,
        activity_service: ActivityService | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        expiry_days: int = INVITATION_EXPIRY_DAYS,
    ) -> None:
        self._uow_factory = uow_factory
        self._email = email_sender
        self._base_url = public_base_url.rstrip("/")
        self._activity = activity_service or ActivityService(uow_factory)
        self._clock = clock
        self._expiry = timedelta(days=expiry_days)
        self._expiry_days = expiry_days

    async def create(
        self,
        inviter_id: UUID,
        email: str,
        invitee_name: str,
        invitation_type: UserType = UserType.USER,
        personal_message: str | None = None,
    ) -> tuple[Invitation, str]:
        """Create a pending invitation.

        Args:
            inviter_id: The user sending the invitation.
            email: The invitee's email address.
            invitee_name: Name used to greet the invitee.
            invitation_type: Role granted on acceptance.
            personal_message: Optional note included in the email.

        Returns:
            Tuple of (Invitation, raw_token). The raw token is only available
            here and must be delivered to the invitee.

        Raises:
            UserNotFoundError: If the inviter does not exist.
            AuthorizationError: If the inviter may not grant this role.
            ValidationError: If the email is blank.
        """
        email = email.lower().strip()
        if not email or "@" not in email:
            raise ValidationError("A valid email address is required", field="email")

        async with self._uow_factory() as uow:
            inviter = await require_user(uow, inviter_id)
            self._require_can_invite(inviter, invitation_type)

            raw_token = secrets.token_urlsafe(32)
            now = self._clock()
            invitation = Invitation(
                email=email,
                invitation_type=invitation_type,
                token_hash=self._hash_token(raw_token),
                invited_by=inviter_id,
                invitee_name=invitee_name.strip() or None,
                personal_message=personal_message,
                created_at=now,
                expires_at=now + self._expiry,
            )
            created = await uow.invitations.create(invitation)

            await self._activity.log(
                uow=uow,
                actor_id=inviter_id,
                action=Actions.INVITATION_CREATED,
                entity_type=EntityTypes.INVITATION,
                entity_id=created.id,
                metadata={"email": created.email, "invitation_type": invitation_type.value},
            )
            await uow.commit()

        logger.info(
            "invitation_created",
            invitation_id=str(created.id),
            invitation_type=invitation_type.value,
        )
        return created, raw_token

    async def notify(
        self, invitation: Invitation, raw_token: str, inviter_name: str
    ) -> EmailDeliveryResult:
        """Send the invitation email. Delivery problems are returned, not raised."""
        message = InvitationEmail(
            recipient_email=invitation.email,
            recipient_name=invitation.invitee_name or invitation.email,
            inviter_name=inviter_name,
            invitation_type=invitation.invitation_type.value,
            response_url=self.response_url(raw_token),
            accept_url=self.response_url(raw_token, InvitationAction.ACCEPT),
            decline_url=self.response_url(raw_token, InvitationAction.DECLINE),
            personal_message=invitation.personal_message,
            expiry_days=self._expiry_days,
        )
        result = await self._email.send_invitation(message)
        if result.error:
            logger.warning(
                "invitation_email_failed",
                invitation_id=str(invitation.id),
                error=result.error,
            )
        return result

    async def validate(self, token: str) -> TokenValidation:
        """Check a token without redeeming it.

        Expiry is checked before the stored status, so a token past its
        expiry reads as ``expired`` whatever happened to it before.
        """
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_token_hash(self._hash_token(token))
        return self._check(invitation)

    async def respond(self, token: str, action: InvitationAction) -> Invitation:
        """Accept or decline an invitation by its raw token.

        Returns:
            The updated invitation. Its ``invitation_type`` is the role the
            invitee signs up with.

        Raises:
            InvitationNotFoundError: If no invitation matches the token.
            InvitationExpiredError: If the invitation has expired.
            InvitationAlreadyUsedError: If it was already accepted or declined.
        """
        target = (
            InvitationStatus.ACCEPTED
            if action == InvitationAction.ACCEPT
            else InvitationStatus.DECLINED
        )

        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_token_hash(self._hash_token(token))
            check = self._check(invitation)
            if invitation is None or not check.valid:
                self._raise_for(check)

            updated = await uow.invitations.respond(
                invitation.id, status=target, responded_at=self._clock()
            )
            if updated is None:
                # Another response landed between the read and the update
                raise InvitationAlreadyUsedError()

            await self._activity.log(
                uow=uow,
                actor_id=None,
                action=(
                    Actions.INVITATION_ACCEPTED
                    if target == InvitationStatus.ACCEPTED
                    else Actions.INVITATION_DECLINED
                ),
                entity_type=EntityTypes.INVITATION,
                entity_id=invitation.id,
                changes=ActivityService.compute_diff(
                    {"status": invitation.status.value}, {"status": target.value}
                ),
                metadata={"email": invitation.email},
            )
            await uow.commit()
            return updated

    async def list_invitations(self, actor_id: UUID) -> list[Invitation]:
        """Admins see every invitation, owners the ones they sent."""
        async with self._uow_factory() as uow:
            actor = await require_user(uow, actor_id)
            if actor.is_admin:
                return await uow.invitations.get_all()  # type: ignore[no-any-return]
            if actor.is_owner:
                return await uow.invitations.get_sent_by(actor_id)  # type: ignore[no-any-return]
            raise AuthorizationError("Guests cannot view invitations")

    async def resend(
        self, invitation_id: UUID, actor_id: UUID, inviter_name: str
    ) -> tuple[Invitation, str, EmailDeliveryResult]:
        """Issue a fresh token for a pending invitation and email it again.

        The previous token stops validating and expiry restarts.

        Returns:
            Tuple of (Invitation, raw_token, EmailDeliveryResult).

        Raises:
            InvitationNotFoundError: If the invitation does not exist, or the
                caller neither sent it nor is an admin.
            InvitationAlreadyUsedError: If it was already answered.
        """
        async with self._uow_factory() as uow:
            actor = await require_user(uow, actor_id)
            invitation = await uow.invitations.get_by_id(invitation_id)
            if not invitation or not (actor.is_admin or invitation.invited_by == actor_id):
                raise InvitationNotFoundError(str(invitation_id))
            if invitation.status not in (InvitationStatus.PENDING, InvitationStatus.EXPIRED):
                raise InvitationAlreadyUsedError(invitation.status.value)

            raw_token = secrets.token_urlsafe(32)
            rotated = await uow.invitations.rotate_token(
                invitation_id,
                token_hash=self._hash_token(raw_token),
                expires_at=self._clock() + self._expiry,
            )

            await self._activity.log(
                uow=uow,
                actor_id=actor_id,
                action=Actions.INVITATION_RESENT,
                entity_type=EntityTypes.INVITATION,
                entity_id=invitation_id,
                metadata={"email": invitation.email},
            )
            await uow.commit()

        result = await self.notify(rotated, raw_token, inviter_name)
        return rotated, raw_token, result

    def response_url(self, token: str, action: InvitationAction | None = None) -> str:
        """Link the invitee follows to answer, optionally pre-selecting the action."""
        params = {"token": token}
        if action:
            params["action"] = action.value
        return f"{self._base_url}/invitation/respond?{urlencode(params)}"

    # --- Internal helpers ---

    def _check(self, invitation: Invitation | None) -> TokenValidation:
        if not invitation:
            return TokenValidation(valid=False, reason=TokenInvalidReason.NOT_FOUND)
        if invitation.is_expired_at(self._clock()):
            return TokenValidation(
                valid=False, reason=TokenInvalidReason.EXPIRED, invitation=invitation
            )
        if invitation.status != InvitationStatus.PENDING:
            return TokenValidation(
                valid=False, reason=TokenInvalidReason.ALREADY_USED, invitation=invitation
            )
        return TokenValidation(valid=True, invitation=invitation)

    @staticmethod
    def _raise_for(check: TokenValidation) -> NoReturn:
        if check.reason == TokenInvalidReason.EXPIRED:
            raise InvitationExpiredError()
        if check.reason == TokenInvalidReason.ALREADY_USED:
            status = check.invitation.status.value if check.invitation else ""
            raise InvitationAlreadyUsedError(status)
        raise InvitationNotFoundError()

    @staticmethod
    def _require_can_invite(inviter: User, invitation_type: UserType) -> None:
        if invitation_type not in INVITABLE_TYPES.get(inviter.user_type, frozenset()):
            raise AuthorizationError(
                f"A {inviter.user_type.value} cannot invite a {invitation_type.value}",
                details={"role": inviter.user_type.value, "invitation_type": invitation_type.value},
            )

    @staticmethod
    def _hash_token(token: str) -> str:
        """Hash a raw invitation token using SHA-256."""
        return hashlib.sha256(token.encode()).hexdigest()
