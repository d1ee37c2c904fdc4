"""SQLAlchemy implementation of Property repository."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.property import Property, PropertyStatus, SyncStatus
from infrastructure.database.models import PropertyModel


class SQLAlchemyPropertyRepository:
    """SQLAlchemy implementation of IPropertyRepository.

    Status changes are single ``UPDATE ... WHERE status = :expected``
    statements; the affected row count tells whether this writer won.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, property: Property) -> Property:
        """Create a new property."""
        model = self._to_model(property)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, id: UUID) -> Property | None:
        """Get a property by ID, always reading the stored row."""
        stmt = (
            select(PropertyModel)
            .where(PropertyModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_owner(self, owner_id: UUID) -> list[Property]:
        stmt = (
            select(PropertyModel)
            .where(PropertyModel.owner_id == owner_id)
            .order_by(PropertyModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all(self) -> list[Property]:
        stmt = select(PropertyModel).order_by(PropertyModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_status(
        self, status: PropertyStatus, order_by_approval: bool = False
    ) -> list[Property]:
        order = (
            PropertyModel.approved_at.asc()
            if order_by_approval
            else PropertyModel.created_at.desc()
        )
        stmt = select(PropertyModel).where(PropertyModel.status == status.value).order_by(order)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def transition(
        self,
        id: UUID,
        expected: PropertyStatus,
        target: PropertyStatus,
        **fields: Any,
    ) -> Property | None:
        """Compare-and-swap the status, writing ``fields`` alongside."""
        values = {
            key: value.value if isinstance(value, Enum) else value
            for key, value in fields.items()
        }
        values["status"] = target.value
        stmt = (
            update(PropertyModel)
            .where(
                PropertyModel.id == id,
                PropertyModel.status == expected.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self.get(id)

    async def claim_enlistment(
        self, id: UUID, now: datetime, stale_before: datetime
    ) -> bool:
        """Take the enlistment claim unless a live one exists."""
        stmt = (
            update(PropertyModel)
            .where(
                PropertyModel.id == id,
                PropertyModel.status == PropertyStatus.APPROVED_PENDING_PROVIDER.value,
                or_(
                    PropertyModel.sync_status.is_(None),
                    PropertyModel.sync_status != SyncStatus.SYNCING.value,
                    PropertyModel.sync_claimed_at.is_(None),
                    PropertyModel.sync_claimed_at < stale_before,
                ),
            )
            .values(
                sync_status=SyncStatus.SYNCING.value,
                sync_claimed_at=now,
                sync_error_message=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined, no-any-return]

    async def record_sync_error(self, id: UUID, message: str) -> None:
        stmt = (
            update(PropertyModel)
            .where(PropertyModel.id == id)
            .values(
                sync_status=SyncStatus.ERROR.value,
                sync_error_message=message,
                sync_claimed_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    def _to_entity(self, model: PropertyModel) -> Property:
        """Convert ORM model to domain entity."""
        return Property(
            id=model.id,
            owner_id=model.owner_id,
            title=model.title,
            description=model.description,
            address=model.address,
            city=model.city,
            state=model.state,
            country=model.country,
            postal_code=model.postal_code,
            price_per_night=model.price_per_night,
            bedrooms=model.bedrooms,
            bathrooms=model.bathrooms,
            max_guests=model.max_guests,
            images=list(model.images or []),
            amenities=list(model.amenities or []),
            status=PropertyStatus(model.status),
            external_reference_id=model.external_reference_id,
            sync_status=SyncStatus(model.sync_status) if model.sync_status else None,
            sync_data=model.sync_data,
            sync_error_message=model.sync_error_message,
            sync_claimed_at=model.sync_claimed_at,
            synced_at=model.synced_at,
            submitted_for_approval_at=model.submitted_for_approval_at,
            approved_at=model.approved_at,
            approved_by=model.approved_by,
            approval_notes=model.approval_notes,
            rejected_at=model.rejected_at,
            rejected_by=model.rejected_by,
            rejection_reason=model.rejection_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Property) -> PropertyModel:
        """Convert domain entity to ORM model."""
        return PropertyModel(
            id=entity.id,
            owner_id=entity.owner_id,
            title=entity.title,
            description=entity.description,
            address=entity.address,
            city=entity.city,
            state=entity.state,
            country=entity.country,
            postal_code=entity.postal_code,
            price_per_night=entity.price_per_night,
            bedrooms=entity.bedrooms,
            bathrooms=entity.bathrooms,
            max_guests=entity.max_guests,
            images=list(entity.images),
            amenities=list(entity.amenities),
            status=entity.status.value,
            external_reference_id=entity.external_reference_id,
            sync_status=entity.sync_status.value if entity.sync_status else None,
            sync_data=entity.sync_data,
            sync_error_message=entity.sync_error_message,
            sync_claimed_at=entity.sync_claimed_at,
            synced_at=entity.synced_at,
            submitted_for_approval_at=entity.submitted_for_approval_at,
            approved_at=entity.approved_at,
            approved_by=entity.approved_by,
            approval_notes=entity.approval_notes,
            rejected_at=entity.rejected_at,
            rejected_by=entity.rejected_by,
            rejection_reason=entity.rejection_reason,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
