"""Property domain entity and lifecycle state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

from core.exceptions import InvalidStateError


class PropertyStatus(StrEnum):
    """Lifecycle status of a property listing."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED_PENDING_PROVIDER = "approved_pending_provider"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class SyncStatus(StrEnum):
    """State of the property's link to the booking provider."""

    SYNCING = "syncing"
    SYNCED = "synced"
    DEMO = "demo"
    ERROR = "error"


# Statuses in which the property has a listing at the provider.
POST_ENLISTMENT_STATUSES: frozenset[PropertyStatus] = frozenset(
    {PropertyStatus.ACTIVE, PropertyStatus.INACTIVE}
)

# The only legal lifecycle moves. Every status change goes through here.
TRANSITIONS: dict[PropertyStatus, frozenset[PropertyStatus]] = {
    PropertyStatus.DRAFT: frozenset({PropertyStatus.PENDING_APPROVAL}),
    PropertyStatus.PENDING_APPROVAL: frozenset(
        {PropertyStatus.APPROVED_PENDING_PROVIDER, PropertyStatus.REJECTED}
    ),
    PropertyStatus.APPROVED_PENDING_PROVIDER: frozenset({PropertyStatus.ACTIVE}),
    PropertyStatus.ACTIVE: frozenset({PropertyStatus.INACTIVE}),
    PropertyStatus.INACTIVE: frozenset({PropertyStatus.ACTIVE}),
    PropertyStatus.REJECTED: frozenset(),
}


def can_transition(current: PropertyStatus, target: PropertyStatus) -> bool:
    """Check whether ``current -> target`` is in the transition table."""
    return target in TRANSITIONS.get(current, frozenset())


def require_transition(
    current: PropertyStatus, target: PropertyStatus, property_id: UUID | None = None
) -> None:
    """Raise InvalidStateError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        allowed_from = sorted(s.value for s, targets in TRANSITIONS.items() if target in targets)
        raise InvalidStateError(
            current=current.value,
            required=allowed_from,
            entity_id=str(property_id) if property_id else None,
        )


@dataclass
class Property:
    """Domain entity for a rental property."""

    owner_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    price_per_night: Decimal | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    max_guests: int | None = None
    images: list[str] = field(default_factory=list)
    amenities: list[str] = field(default_factory=list)
    status: PropertyStatus = PropertyStatus.DRAFT

    # Booking provider link
    external_reference_id: str | None = None
    sync_status: SyncStatus | None = None
    sync_data: dict[str, Any] | None = None
    sync_error_message: str | None = None
    sync_claimed_at: datetime | None = None
    synced_at: datetime | None = None

    # Review trail
    submitted_for_approval_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: UUID | None = None
    approval_notes: str | None = None
    rejected_at: datetime | None = None
    rejected_by: UUID | None = None
    rejection_reason: str | None = None

    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_enlisted(self) -> bool:
        return self.status in POST_ENLISTMENT_STATUSES

    @property
    def is_bookable(self) -> bool:
        return self.status == PropertyStatus.ACTIVE

    def snapshot(self) -> dict[str, Any]:
        """Normalized view of the listing data sent to the booking provider."""
        return {
            "id": str(self.id),
            "name": self.title,
            "description": self.description or "",
            "address": self.address or "",
            "city": self.city or "",
            "state": self.state or "",
            "country": self.country or "",
            "postal_code": self.postal_code or "",
            "max_guests": self.max_guests or 1,
            "bedrooms": self.bedrooms or 1,
            "bathrooms": self.bathrooms or 1,
            "price_per_night": self.price_per_night or Decimal("0"),
            "images": list(self.images),
            "amenities": list(self.amenities),
        }
