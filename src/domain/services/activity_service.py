"""Audit trail for property, invitation and trust network changes."""

from collections.abc import Callable, Mapping
from typing import Any
from uuid import UUID

from domain.entities.activity import ActivityLog
from domain.repositories.unit_of_work import IUnitOfWork


class ActivityService:
    """Writes audit entries inside other services' transactions and reads them back."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def log(
        self,
        uow: IUnitOfWork,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: UUID,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityLog:
        """Append an entry using the caller's open unit of work.

        Nothing is committed here: the entry lands or disappears together
        with the change it describes.

        Args:
            uow: The caller's active unit of work.
            actor_id: Who acted, or None for token-authenticated public calls.
            action: One of the ``Actions`` constants.
            entity_type: One of the ``EntityTypes`` constants.
            entity_id: The affected row.
            changes: Field-level changes, see ``compute_diff``.
            metadata: Extra context such as an email or a provider id.
        """
        return await uow.activities.create(  # type: ignore[no-any-return]
            ActivityLog(
                actor_id=actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                changes=changes,
                metadata=metadata,
            )
        )

    async def get_entity_history(
        self, entity_type: str, entity_id: UUID, limit: int = 50
    ) -> list[ActivityLog]:
        """Entries for one entity, newest first. Callers check access."""
        async with self._uow_factory() as uow:
            return await uow.activities.get_for_entity(  # type: ignore[no-any-return]
                entity_type, entity_id, limit=limit
            )

    async def get_user_activity(self, user_id: UUID, limit: int = 50) -> list[ActivityLog]:
        async with self._uow_factory() as uow:
            return await uow.activities.get_for_user(user_id, limit=limit)  # type: ignore[no-any-return]

    @staticmethod
    def compute_diff(
        old: Mapping[str, Any], new: Mapping[str, Any]
    ) -> dict[str, dict[str, Any]]:
        """Return ``{field: {"old": ..., "new": ...}}`` for every field that differs."""
        return {
            key: {"old": old.get(key), "new": new.get(key)}
            for key in old.keys() | new.keys()
            if old.get(key) != new.get(key)
        }
