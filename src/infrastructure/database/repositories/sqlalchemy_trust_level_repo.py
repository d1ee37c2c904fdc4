"""SQLAlchemy implementation of Trust Level repository."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.trust_level import GuestTrustAssignment, TrustLevel
from infrastructure.database.models import GuestTrustAssignmentModel, TrustLevelModel


class SQLAlchemyTrustLevelRepository:
    """SQLAlchemy implementation of ITrustLevelRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, trust_level: TrustLevel) -> TrustLevel:
        """Create a trust level."""
        model = TrustLevelModel(
            id=trust_level.id,
            owner_id=trust_level.owner_id,
            level=trust_level.level,
            name=trust_level.name,
            discount_percentage=trust_level.discount_percentage,
            created_at=trust_level.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, id: UUID) -> TrustLevel | None:
        model = await self._session.get(TrustLevelModel, id)
        return self._to_entity(model) if model else None

    async def get_for_owner(self, owner_id: UUID) -> list[TrustLevel]:
        stmt = (
            select(TrustLevelModel)
            .where(TrustLevelModel.owner_id == owner_id)
            .order_by(TrustLevelModel.level)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_level(self, owner_id: UUID, level: int) -> TrustLevel | None:
        stmt = select(TrustLevelModel).where(
            TrustLevelModel.owner_id == owner_id,
            TrustLevelModel.level == level,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def delete(self, id: UUID) -> bool:
        model = await self._session.get(TrustLevelModel, id)
        if not model:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def count_assignments(self, trust_level_id: UUID) -> int:
        stmt = select(func.count()).where(
            GuestTrustAssignmentModel.trust_level_id == trust_level_id
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def get_assignment(
        self, owner_id: UUID, guest_id: UUID
    ) -> GuestTrustAssignment | None:
        model = await self._session.get(GuestTrustAssignmentModel, (owner_id, guest_id))
        return self._assignment_to_entity(model) if model else None

    async def upsert_assignment(
        self, assignment: GuestTrustAssignment
    ) -> GuestTrustAssignment:
        """Create or replace the guest's assignment in the owner's network."""
        model = await self._session.get(
            GuestTrustAssignmentModel, (assignment.owner_id, assignment.guest_id)
        )
        if model:
            model.trust_level_id = assignment.trust_level_id
            model.assigned_at = assignment.assigned_at
        else:
            model = GuestTrustAssignmentModel(
                owner_id=assignment.owner_id,
                guest_id=assignment.guest_id,
                trust_level_id=assignment.trust_level_id,
                assigned_at=assignment.assigned_at,
            )
            self._session.add(model)
        await self._session.flush()
        return self._assignment_to_entity(model)

    def _to_entity(self, model: TrustLevelModel) -> TrustLevel:
        return TrustLevel(
            id=model.id,
            owner_id=model.owner_id,
            level=model.level,
            name=model.name,
            discount_percentage=model.discount_percentage,
            created_at=model.created_at,
        )

    def _assignment_to_entity(self, model: GuestTrustAssignmentModel) -> GuestTrustAssignment:
        return GuestTrustAssignment(
            owner_id=model.owner_id,
            guest_id=model.guest_id,
            trust_level_id=model.trust_level_id,
            assigned_at=model.assigned_at,
        )
