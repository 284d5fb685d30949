"""Per-user counters for the dashboard."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.learning_guide import LearningGuide
from app.models.note import Note
from app.models.task import Task
from app.schemas.stats import StatsResponse

logger = logging.getLogger(__name__)


class StatsService:
    async def _count(self, db: AsyncSession, model, *criteria) -> int:
        result = await db.execute(select(func.count()).select_from(model).where(*criteria))
        return result.scalar_one()

    async def get_stats(self, db: AsyncSession, user_id: UUID) -> StatsResponse:
        try:
            total_notes = await self._count(db, Note, Note.user_id == user_id)
            total_tasks = await self._count(db, Task, Task.user_id == user_id)
            completed_tasks = await self._count(
                db, Task, Task.user_id == user_id, Task.completed.is_(True)
            )
            ai_learnings = await self._count(db, LearningGuide, LearningGuide.user_id == user_id)
        except SQLAlchemyError as e:
            logger.error("Database error computing stats for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "stats"})

        return StatsResponse(
            total_notes=total_notes,
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            pending_tasks=total_tasks - completed_tasks,
            ai_learnings=ai_learnings,
        )


stats_service = StatsService()
