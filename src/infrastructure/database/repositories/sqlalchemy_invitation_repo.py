"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.user import UserType
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        model = await self._session.get(InvitationModel, id)
        return self._to_entity(model) if model else None

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        stmt = select(InvitationModel).where(InvitationModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[Invitation]:
        """Get every invitation, newest first."""
        stmt = select(InvitationModel).order_by(InvitationModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_sent_by(self, inviter_id: UUID) -> list[Invitation]:
        """Get invitations created by a user, newest first."""
        stmt = (
            select(InvitationModel)
            .where(InvitationModel.invited_by == inviter_id)
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def respond(
        self, id: UUID, status: InvitationStatus, responded_at: datetime
    ) -> Invitation | None:
        """Conditionally move a pending invitation to ``status``."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.id == id,
                InvitationModel.status == InvitationStatus.PENDING.value,
            )
            .values(status=status.value, responded_at=responded_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self._reload(id)

    async def rotate_token(
        self, id: UUID, token_hash: str, expires_at: datetime
    ) -> Invitation:
        """Replace the token hash and restart the expiry window."""
        stmt = (
            update(InvitationModel)
            .where(InvitationModel.id == id)
            .values(token_hash=token_hash, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        invitation = await self._reload(id)
        if not invitation:
            raise ValueError(f"Invitation {id} not found")
        return invitation

    async def _reload(self, id: UUID) -> Invitation | None:
        stmt = (
            select(InvitationModel)
            .where(InvitationModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            email=model.email,
            invitee_name=model.invitee_name,
            invitation_type=UserType(model.invitation_type),
            token_hash=model.token_hash,
            invited_by=model.invited_by,
            personal_message=model.personal_message,
            status=InvitationStatus(model.status),
            created_at=model.created_at,
            expires_at=model.expires_at,
            responded_at=model.responded_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        return InvitationModel(
            id=entity.id,
            email=entity.email,
            invitee_name=entity.invitee_name,
            invitation_type=entity.invitation_type.value,
            token_hash=entity.token_hash,
            invited_by=entity.invited_by,
            personal_message=entity.personal_message,
            status=entity.status.value,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            responded_at=entity.responded_at,
        )
