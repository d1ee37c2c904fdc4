"""Property lifecycle service: creation, review, enlistment and listing state."""

from collections.abc import Callable
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import (
    EnlistmentInProgressError,
    InvalidStateError,
    NotOwnerError,
    PropertyNotFoundError,
    ProviderError,
    TransientNetworkError,
    ValidationError,
)
from domain.entities.activity import Actions, ActivityLog, EntityTypes
from domain.entities.property import (
    Property,
    PropertyStatus,
    SyncStatus,
    require_transition,
)
from domain.entities.user import UserType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService
from domain.services.authorization import (
    require_admin,
    require_owner_or_admin,
    require_role,
    require_user,
)
from infrastructure.booking.provider import IBookingProvider, ListingResult

logger = structlog.get_logger()

DEFAULT_CLAIM_TTL_SECONDS = 300
DEFAULT_PRICING_HORIZON_DAYS = 365


class PropertyService:
    """Moves properties through draft -> pending_approval ->
    approved_pending_provider -> active, with rejection and
    active <-> inactive toggling on the side.

    Every status change is a conditional update against the stored status
    and writes an audit entry in the same transaction.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        booking_provider: IBookingProvider,
        activity_service: ActivityService | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        claim_ttl_seconds: int = DEFAULT_CLAIM_TTL_SECONDS,
        pricing_horizon_days: int = DEFAULT_PRICING_HORIZON_DAYS,
    ) -> None:
        self._uow_factory = uow_factory
        self._provider = booking_provider
        self._activity = activity_service or ActivityService(uow_factory)
        self._clock = clock
        self._claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self._pricing_horizon = timedelta(days=pricing_horizon_days)

    # --- Creation and reads ---

    async def create_property(
        self,
        owner_id: UUID,
        title: str,
        description: str | None = None,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        country: str | None = None,
        postal_code: str | None = None,
        price_per_night: Decimal | None = None,
        bedrooms: int | None = None,
        bathrooms: int | None = None,
        max_guests: int | None = None,
        images: list[str] | None = None,
        amenities: list[str] | None = None,
    ) -> Property:
        """Create a property suggestion in ``draft``.

        Raises:
            AuthorizationError: If the caller is a guest.
            ValidationError: If the title is blank or the price negative.
        """
        if not title.strip():
            raise ValidationError("Title is required", field="title")
        if price_per_night is not None and price_per_night < 0:
            raise ValidationError("Price per night cannot be negative", field="price_per_night")

        async with self._uow_factory() as uow:
            await require_role(uow, owner_id, UserType.OWNER, UserType.ADMIN)

            now = self._clock()
            property = Property(
                owner_id=owner_id,
                title=title.strip(),
                description=description,
                address=address,
                city=city,
                state=state,
                country=country,
                postal_code=postal_code,
                price_per_night=price_per_night,
                bedrooms=bedrooms,
                bathrooms=bathrooms,
                max_guests=max_guests,
                images=images or [],
                amenities=amenities or [],
                status=PropertyStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            created = await uow.properties.create(property)

            await self._activity.log(
                uow=uow,
                actor_id=owner_id,
                action=Actions.PROPERTY_CREATED,
                entity_type=EntityTypes.PROPERTY,
                entity_id=created.id,
                metadata={"property_title": created.title, "property_city": created.city},
            )
            await uow.commit()
            return created

    async def get_property(self, property_id: UUID, actor_id: UUID) -> Property:
        """Get a property. Active listings are visible to everyone,
        anything else only to its owner and admins."""
        async with self._uow_factory() as uow:
            user = await require_user(uow, actor_id)
            property = await self._get_or_raise(uow, property_id)
            if property.status != PropertyStatus.ACTIVE:
                try:
                    require_owner_or_admin(user, property)
                except NotOwnerError:
                    # Don't leak unpublished listings
                    raise PropertyNotFoundError(str(property_id)) from None
            return property

    async def list_properties(self, actor_id: UUID) -> list[Property]:
        """Admins see every property, owners their own, guests active listings."""
        async with self._uow_factory() as uow:
            user = await require_user(uow, actor_id)
            if user.is_admin:
                return await uow.properties.get_all()  # type: ignore[no-any-return]
            if user.is_owner:
                return await uow.properties.get_for_owner(user.id)  # type: ignore[no-any-return]
            return await uow.properties.get_by_status(PropertyStatus.ACTIVE)  # type: ignore[no-any-return]

    async def list_pending_enlistment(self, admin_id: UUID) -> list[Property]:
        """Approved properties waiting for enlistment, oldest approval first."""
        async with self._uow_factory() as uow:
            await require_admin(uow, admin_id)
            return await uow.properties.get_by_status(  # type: ignore[no-any-return]
                PropertyStatus.APPROVED_PENDING_PROVIDER, order_by_approval=True
            )

    async def get_property_history(
        self, property_id: UUID, actor_id: UUID, limit: int = 50
    ) -> list[ActivityLog]:
        """Audit entries for a property, newest first. Owner or admin only."""
        async with self._uow_factory() as uow:
            user = await require_user(uow, actor_id)
            property = await self._get_or_raise(uow, property_id)
            require_owner_or_admin(user, property)
        return await self._activity.get_entity_history(
            EntityTypes.PROPERTY, property_id, limit=limit
        )

    # --- Review ---

    async def submit_for_approval(self, property_id: UUID, owner_id: UUID) -> Property:
        """Submit a draft for admin review.

        Raises:
            PropertyNotFoundError: If the property does not exist.
            NotOwnerError: If the caller does not own the property.
            InvalidStateError: If the property is not in draft.
        """
        async with self._uow_factory() as uow:
            property = await self._get_or_raise(uow, property_id)
            if property.owner_id != owner_id:
                raise NotOwnerError(str(property_id))

            now = self._clock()
            updated = await self._transition(
                uow,
                property,
                PropertyStatus.PENDING_APPROVAL,
                submitted_for_approval_at=now,
                updated_at=now,
            )
            await self._log_transition(
                uow, owner_id, Actions.PROPERTY_SUBMITTED, property, updated
            )
            await uow.commit()
            return updated

    async def approve(
        self, property_id: UUID, admin_id: UUID, notes: str | None = None
    ) -> Property:
        """Approve a submitted property; it then waits for enlistment.

        Raises:
            AuthorizationError: If the caller is not an admin.
            PropertyNotFoundError: If the property does not exist.
            InvalidStateError: If the property is not pending approval.
        """
        async with self._uow_factory() as uow:
            await require_admin(uow, admin_id)
            property = await self._get_or_raise(uow, property_id)

            now = self._clock()
            updated = await self._transition(
                uow,
                property,
                PropertyStatus.APPROVED_PENDING_PROVIDER,
                approved_at=now,
                approved_by=admin_id,
                approval_notes=notes,
                updated_at=now,
            )
            await self._log_transition(
                uow, admin_id, Actions.PROPERTY_APPROVED, property, updated,
                metadata={"notes": notes},
            )
            await uow.commit()
            return updated

    async def reject(self, property_id: UUID, admin_id: UUID, reason: str) -> Property:
        """Reject a submitted property with a reason shown to the owner."""
        if not reason.strip():
            raise ValidationError("A rejection reason is required", field="reason")

        async with self._uow_factory() as uow:
            await require_admin(uow, admin_id)
            property = await self._get_or_raise(uow, property_id)

            now = self._clock()
            updated = await self._transition(
                uow,
                property,
                PropertyStatus.REJECTED,
                rejected_at=now,
                rejected_by=admin_id,
                rejection_reason=reason.strip(),
                updated_at=now,
            )
            await self._log_transition(
                uow, admin_id, Actions.PROPERTY_REJECTED, property, updated,
                metadata={"reason": reason.strip()},
            )
            await uow.commit()
            return updated

    # --- Enlistment ---

    async def enlist_to_provider(self, property_id: UUID, admin_id: UUID) -> Property:
        """Create the property's listing at the booking provider and activate it.

        The property is claimed (sync status ``syncing``) with a conditional
        update before the provider is called, so concurrent callers cannot
        both create a listing. On failure the status stays
        ``approved_pending_provider``, the sync status becomes ``error``, the
        claim is released and the error is re-raised for the caller to retry.

        Raises:
            AuthorizationError: If the caller is not an admin.
            PropertyNotFoundError: If the property does not exist.
            InvalidStateError: If the property is not awaiting enlistment.
            EnlistmentInProgressError: If another enlistment holds the claim.
            ProviderError / TransientNetworkError: If the provider call failed.
        """
        now = self._clock()

        async with self._uow_factory() as uow:
            await require_admin(uow, admin_id)
            property = await self._get_or_raise(uow, property_id)
            require_transition(property.status, PropertyStatus.ACTIVE, property.id)

            claimed = await uow.properties.claim_enlistment(
                property_id, now=now, stale_before=now - self._claim_ttl
            )
            if not claimed:
                current = await self._get_or_raise(uow, property_id)
                if current.status != PropertyStatus.APPROVED_PENDING_PROVIDER:
                    raise InvalidStateError(
                        current=current.status.value,
                        required=PropertyStatus.APPROVED_PENDING_PROVIDER.value,
                        entity_id=str(property_id),
                    )
                raise EnlistmentInProgressError(str(property_id))

            trust_levels = await uow.trust_levels.get_for_owner(property.owner_id)
            await uow.commit()

        log = logger.bind(property_id=str(property_id), admin_id=str(admin_id))

        try:
            listing = await self._provider.create_listing(property.snapshot())
            sync_data = dict(listing.sync_data)
            sync_data.update(
                await self._seed_listing(property, listing, trust_levels, now.date(), log)
            )
        except (ProviderError, TransientNetworkError) as e:
            log.warning("provider_call_failed", error_code=e.error_code.value, error=e.message)
            await self._release_claim(property_id, e.message)
            raise
        except Exception as e:
            log.exception("enlistment_failed")
            await self._release_claim(property_id, f"Unexpected enlistment failure: {e}")
            raise

        async with self._uow_factory() as uow:
            finished = self._clock()
            updated = await uow.properties.transition(
                property_id,
                expected=PropertyStatus.APPROVED_PENDING_PROVIDER,
                target=PropertyStatus.ACTIVE,
                external_reference_id=listing.external_id,
                sync_status=SyncStatus.DEMO if listing.demo else SyncStatus.SYNCED,
                sync_data=sync_data,
                sync_error_message=None,
                sync_claimed_at=None,
                synced_at=finished,
                updated_at=finished,
            )
            if updated is None:
                log.error("enlistment_orphaned_listing", external_id=listing.external_id)
                current = await self._get_or_raise(uow, property_id)
                raise InvalidStateError(
                    current=current.status.value,
                    required=PropertyStatus.APPROVED_PENDING_PROVIDER.value,
                    entity_id=str(property_id),
                )

            await self._log_transition(
                uow, admin_id, Actions.PROPERTY_ENLISTED, property, updated,
                metadata={
                    "external_reference_id": listing.external_id,
                    "property_title": property.title,
                    "demo": listing.demo,
                },
            )
            await uow.commit()

        log.info("property_enlisted", external_id=listing.external_id, demo=listing.demo)
        return updated

    # --- Listing state ---

    async def deactivate(self, property_id: UUID, actor_id: UUID) -> Property:
        """Close an active listing for booking."""
        return await self._set_listing_active(property_id, actor_id, active=False)

    async def reactivate(self, property_id: UUID, actor_id: UUID) -> Property:
        """Reopen an inactive listing for booking."""
        return await self._set_listing_active(property_id, actor_id, active=True)

    async def _set_listing_active(
        self, property_id: UUID, actor_id: UUID, active: bool
    ) -> Property:
        target = PropertyStatus.ACTIVE if active else PropertyStatus.INACTIVE

        async with self._uow_factory() as uow:
            user = await require_user(uow, actor_id)
            property = await self._get_or_raise(uow, property_id)
            require_owner_or_admin(user, property)
            require_transition(property.status, target, property.id)

        # Demo listings have nothing at the provider to update
        if property.external_reference_id and property.sync_status != SyncStatus.DEMO:
            await self._provider.set_listing_status(property.external_reference_id, active)

        async with self._uow_factory() as uow:
            updated = await self._transition(uow, property, target, updated_at=self._clock())
            await self._log_transition(
                uow,
                actor_id,
                Actions.PROPERTY_REACTIVATED if active else Actions.PROPERTY_DEACTIVATED,
                property,
                updated,
            )
            await uow.commit()
            return updated

    # --- Internal helpers ---

    async def _get_or_raise(self, uow: IUnitOfWork, property_id: UUID) -> Property:
        property = await uow.properties.get(property_id)
        if not property:
            raise PropertyNotFoundError(str(property_id))
        return property

    async def _transition(
        self,
        uow: IUnitOfWork,
        property: Property,
        target: PropertyStatus,
        **fields: Any,
    ) -> Property:
        """Check the transition table, then compare-and-swap the status."""
        require_transition(property.status, target, property.id)
        updated = await uow.properties.transition(
            property.id, expected=property.status, target=target, **fields
        )
        if updated is None:
            # Lost a race: report the state we actually found
            current = await self._get_or_raise(uow, property.id)
            raise InvalidStateError(
                current=current.status.value,
                required=property.status.value,
                entity_id=str(property.id),
            )
        return updated

    async def _log_transition(
        self,
        uow: IUnitOfWork,
        actor_id: UUID,
        action: str,
        before: Property,
        after: Property,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await self._activity.log(
            uow=uow,
            actor_id=actor_id,
            action=action,
            entity_type=EntityTypes.PROPERTY,
            entity_id=before.id,
            changes=ActivityService.compute_diff(
                {"status": before.status.value},
                {"status": after.status.value},
            ),
            metadata=metadata,
        )

    async def _seed_listing(
        self,
        property: Property,
        listing: ListingResult,
        trust_levels: list[Any],
        start: date,
        log: Any,
    ) -> dict[str, Any]:
        """Best-effort follow-ups after the listing exists: pricing and vouchers.

        Failures are recorded in the sync metadata but never undo the
        enlistment, since the listing already exists at the provider.
        """
        extra: dict[str, Any] = {}

        if listing.room_ids and property.price_per_night is not None:
            try:
                await self._provider.set_pricing(
                    listing.external_id,
                    listing.room_ids[0],
                    start=start,
                    end=start + self._pricing_horizon,
                    price=property.price_per_night,
                )
                extra["pricing_seeded"] = True
            except (ProviderError, TransientNetworkError) as e:
                log.warning("provider_pricing_failed", error=e.message)
                extra["pricing_seeded"] = False
                extra["pricing_error"] = e.message

        if trust_levels:
            try:
                extra["vouchers"] = await self._provider.create_vouchers(
                    listing.external_id, trust_levels, valid_from=start
                )
            except (ProviderError, TransientNetworkError) as e:
                log.warning("provider_vouchers_failed", error=e.message)
                extra["vouchers"] = []
                extra["voucher_error"] = e.message

        return extra

    async def _release_claim(self, property_id: UUID, message: str) -> None:
        async with self._uow_factory() as uow:
            await uow.properties.record_sync_error(property_id, message)
            await uow.commit()
