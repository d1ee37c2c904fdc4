"""SQLAlchemy implementation of the append-only activity log."""

from typing import Any, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.activity import ActivityLog
from infrastructure.database.models import ActivityLogModel


class SQLAlchemyActivityRepository:
    """Activity log rows are only ever inserted, never updated."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, activity: ActivityLog) -> ActivityLog:
        self._session.add(
            ActivityLogModel(
                id=activity.id,
                actor_id=activity.actor_id,
                action=activity.action,
                entity_type=activity.entity_type,
                entity_id=activity.entity_id,
                changes=activity.changes,
                metadata_=activity.metadata,
                created_at=activity.created_at,
            )
        )
        await self._session.flush()
        return activity

    async def get_for_entity(
        self,
        entity_type: str,
        entity_id: UUID,
        limit: int = 50,
    ) -> List[ActivityLog]:
        return await self._newest(
            ActivityLogModel.entity_type == entity_type,
            ActivityLogModel.entity_id == entity_id,
            limit=limit,
        )

    async def get_for_user(self, user_id: UUID, limit: int = 50) -> List[ActivityLog]:
        return await self._newest(ActivityLogModel.actor_id == user_id, limit=limit)

    async def _newest(self, *criteria: Any, limit: int) -> List[ActivityLog]:
        stmt = (
            select(ActivityLogModel)
            .where(*criteria)
            .order_by(ActivityLogModel.created_at.desc(), ActivityLogModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [
            ActivityLog(
                id=row.id,
                actor_id=row.actor_id,
                action=row.action,
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                changes=row.changes,
                metadata=row.metadata_,
                created_at=row.created_at,
            )
            for row in result.scalars()
        ]
