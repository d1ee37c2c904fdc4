"""Property repository protocol."""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from domain.entities.property import Property, PropertyStatus


class IPropertyRepository(Protocol):
    """Repository interface for Property entities."""

    async def create(self, property: Property) -> Property:
        """Create a new property."""
        ...

    async def get(self, id: UUID) -> Property | None:
        """Get a property by ID."""
        ...

    async def get_for_owner(self, owner_id: UUID) -> list[Property]:
        """Get all properties of an owner, newest first."""
        ...

    async def get_all(self) -> list[Property]:
        """Get every property, newest first."""
        ...

    async def get_by_status(
        self, status: PropertyStatus, order_by_approval: bool = False
    ) -> list[Property]:
        """Get properties in a status, optionally oldest-approved first."""
        ...

    async def transition(
        self,
        id: UUID,
        expected: PropertyStatus,
        target: PropertyStatus,
        **fields: Any,
    ) -> Property | None:
        """Move ``expected -> target`` only if the stored status is still ``expected``.

        Returns the updated property, or None when the row was not in
        ``expected`` (another writer got there first).
        """
        ...

    async def claim_enlistment(
        self, id: UUID, now: datetime, stale_before: datetime
    ) -> bool:
        """Mark the property as syncing if no live claim exists.

        Returns True when this caller now holds the claim.
        """
        ...

    async def record_sync_error(self, id: UUID, message: str) -> None:
        """Set sync status to error with the captured message; status untouched."""
        ...
