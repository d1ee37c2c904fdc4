"""Trust level repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.trust_level import GuestTrustAssignment, TrustLevel


class ITrustLevelRepository(Protocol):
    """Repository interface for trust levels and guest assignments."""

    async def create(self, trust_level: TrustLevel) -> TrustLevel:
        """Create a trust level."""
        ...

    async def get(self, id: UUID) -> TrustLevel | None:
        """Get a trust level by ID."""
        ...

    async def get_for_owner(self, owner_id: UUID) -> list[TrustLevel]:
        """Get an owner's trust levels ordered by level ascending."""
        ...

    async def get_by_level(self, owner_id: UUID, level: int) -> TrustLevel | None:
        """Get an owner's trust level by its number."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a trust level."""
        ...

    async def count_assignments(self, trust_level_id: UUID) -> int:
        """Count guests placed on a trust level."""
        ...

    async def get_assignment(
        self, owner_id: UUID, guest_id: UUID
    ) -> GuestTrustAssignment | None:
        """Get the guest's assignment in the owner's network."""
        ...

    async def upsert_assignment(
        self, assignment: GuestTrustAssignment
    ) -> GuestTrustAssignment:
        """Create or replace the guest's assignment in the owner's network."""
        ...
