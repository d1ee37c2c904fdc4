"""Trust level service: owner discount tiers and guest price quotes."""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from core.exceptions import (
    DuplicateTrustLevelError,
    InvalidStateError,
    LastTrustLevelError,
    PropertyNotFoundError,
    TrustLevelInUseError,
    TrustLevelNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from domain.entities.activity import Actions, EntityTypes
from domain.entities.property import PropertyStatus
from domain.entities.trust_level import (
    MAX_LEVEL,
    MIN_LEVEL,
    GuestTrustAssignment,
    PriceQuote,
    TrustLevel,
    apply_discount,
)
from domain.entities.user import UserType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService
from domain.services.authorization import require_role


class TrustLevelService:
    """Service layer for trust levels, guest assignments and quotes."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        activity_service: ActivityService | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._activity = activity_service or ActivityService(uow_factory)
        self._clock = clock

    async def create_level(
        self,
        owner_id: UUID,
        level: int,
        name: str,
        discount_percentage: Decimal,
    ) -> TrustLevel:
        """Define a new trust level for the owner's network.

        Raises:
            AuthorizationError: If the caller is not an owner.
            ValidationError: If level, name or discount are out of range.
            DuplicateTrustLevelError: If the owner already has this level.
        """
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            raise ValidationError(
                f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}", field="level"
            )
        if not name.strip():
            raise ValidationError("Name is required", field="name")
        if not Decimal("0") <= discount_percentage <= Decimal("100"):
            raise ValidationError(
                "Discount must be between 0 and 100", field="discount_percentage"
            )

        async with self._uow_factory() as uow:
            await require_role(uow, owner_id, UserType.OWNER)

            if await uow.trust_levels.get_by_level(owner_id, level):
                raise DuplicateTrustLevelError(level)

            created = await uow.trust_levels.create(
                TrustLevel(
                    owner_id=owner_id,
                    level=level,
                    name=name.strip(),
                    discount_percentage=discount_percentage,
                    created_at=self._clock(),
                )
            )
            await self._activity.log(
                uow=uow,
                actor_id=owner_id,
                action=Actions.TRUST_LEVEL_CREATED,
                entity_type=EntityTypes.TRUST_LEVEL,
                entity_id=created.id,
                metadata={
                    "level": level,
                    "name": created.name,
                    "discount_percentage": str(discount_percentage),
                },
            )
            await uow.commit()
            return created

    async def list_levels(self, owner_id: UUID) -> list[TrustLevel]:
        async with self._uow_factory() as uow:
            return await uow.trust_levels.get_for_owner(owner_id)  # type: ignore[no-any-return]

    async def delete_level(self, owner_id: UUID, level_id: UUID) -> bool:
        """Delete one of the owner's trust levels.

        Raises:
            TrustLevelNotFoundError: If the level does not exist or is not the caller's.
            LastTrustLevelError: If it is the owner's only level.
            TrustLevelInUseError: If guests are still assigned to it.
        """
        async with self._uow_factory() as uow:
            trust_level = await self._get_owned(uow, owner_id, level_id)

            remaining = await uow.trust_levels.get_for_owner(owner_id)
            if len(remaining) <= 1:
                raise LastTrustLevelError()
            if await uow.trust_levels.count_assignments(level_id) > 0:
                raise TrustLevelInUseError(str(level_id))

            await uow.trust_levels.delete(level_id)
            await self._activity.log(
                uow=uow,
                actor_id=owner_id,
                action=Actions.TRUST_LEVEL_DELETED,
                entity_type=EntityTypes.TRUST_LEVEL,
                entity_id=level_id,
                metadata={"level": trust_level.level, "name": trust_level.name},
            )
            await uow.commit()
            return True

    async def assign_guest(
        self, owner_id: UUID, guest_id: UUID, level_id: UUID
    ) -> GuestTrustAssignment:
        """Place a guest on one of the owner's levels, replacing any previous one."""
        async with self._uow_factory() as uow:
            trust_level = await self._get_owned(uow, owner_id, level_id)

            guest = await uow.users.get(guest_id)
            if not guest:
                raise UserNotFoundError(str(guest_id))
            if guest.user_type != UserType.USER:
                raise ValidationError("Only guests can be assigned a trust level", field="guest_id")

            previous = await uow.trust_levels.get_assignment(owner_id, guest_id)
            assignment = await uow.trust_levels.upsert_assignment(
                GuestTrustAssignment(
                    owner_id=owner_id,
                    guest_id=guest_id,
                    trust_level_id=level_id,
                    assigned_at=self._clock(),
                )
            )
            await self._activity.log(
                uow=uow,
                actor_id=owner_id,
                action=Actions.TRUST_LEVEL_ASSIGNED,
                entity_type=EntityTypes.TRUST_LEVEL,
                entity_id=level_id,
                changes=ActivityService.compute_diff(
                    {"trust_level_id": str(previous.trust_level_id) if previous else None},
                    {"trust_level_id": str(level_id)},
                ),
                metadata={"guest_id": str(guest_id), "level": trust_level.level},
            )
            await uow.commit()
            return assignment

    async def quote(self, property_id: UUID, guest_id: UUID, nights: int) -> PriceQuote:
        """Price a stay for a guest using their level in the owner's network.

        Guests without an assignment pay the undiscounted price.

        Raises:
            ValidationError: If ``nights`` is not positive.
            PropertyNotFoundError: If the property does not exist.
            InvalidStateError: If the property is not bookable.
        """
        if nights < 1:
            raise ValidationError("Nights must be at least 1", field="nights")

        async with self._uow_factory() as uow:
            property = await uow.properties.get(property_id)
            if not property:
                raise PropertyNotFoundError(str(property_id))
            if not property.is_bookable:
                raise InvalidStateError(
                    current=property.status.value,
                    required=PropertyStatus.ACTIVE.value,
                    entity_id=str(property_id),
                )

            trust_level: TrustLevel | None = None
            assignment = await uow.trust_levels.get_assignment(property.owner_id, guest_id)
            if assignment:
                trust_level = await uow.trust_levels.get(assignment.trust_level_id)

        nightly = property.price_per_night or Decimal("0")
        subtotal = nightly * nights
        discount = trust_level.discount_percentage if trust_level else Decimal("0")
        return PriceQuote(
            property_id=property_id,
            guest_id=guest_id,
            nights=nights,
            nightly_price=nightly,
            subtotal=subtotal,
            discount_percentage=discount,
            total=apply_discount(subtotal, discount),
            trust_level=trust_level.level if trust_level else None,
        )

    # --- Internal helpers ---

    async def _get_owned(
        self, uow: IUnitOfWork, owner_id: UUID, level_id: UUID
    ) -> TrustLevel:
        trust_level = await uow.trust_levels.get(level_id)
        if not trust_level or trust_level.owner_id != owner_id:
            raise TrustLevelNotFoundError(str(level_id))
        return trust_level
