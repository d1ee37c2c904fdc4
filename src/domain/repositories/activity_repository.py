"""Activity log repository protocol."""

from typing import List, Protocol
from uuid import UUID

from domain.entities.activity import ActivityLog


class IActivityRepository(Protocol):
    """Append-only store of audit entries. Reads are newest first."""

    async def create(self, activity: ActivityLog) -> ActivityLog: ...

    async def get_for_entity(
        self, entity_type: str, entity_id: UUID, limit: int = 50
    ) -> List[ActivityLog]:
        """History of one property, invitation or trust level."""
        ...

    async def get_for_user(self, user_id: UUID, limit: int = 50) -> List[ActivityLog]:
        """Entries the user authored. Public token responses have no author."""
        ...
