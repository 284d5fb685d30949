"""
LearnLoop Backend - Task Service
================================

Owner-scoped task CRUD. Every lookup filters on (task id, user id), so a
task owned by someone else is reported exactly like a missing one.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
MAX_TITLE_LENGTH = 255


def _validate_title(title: str) -> str:
    title = title.strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise ValidationError(
            message=f"Title must be at least {MIN_TITLE_LENGTH} characters",
            field="title",
        )
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            message=f"Title must be at most {MAX_TITLE_LENGTH} characters",
            field="title",
        )
    return title


class TaskService:
    async def _get_owned(self, db: AsyncSession, user_id: UUID, task_id: UUID) -> Task:
        try:
            result = await db.execute(
                select(Task).where(Task.id == task_id, Task.user_id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching task %s: %s", task_id, str(e))
            raise DatabaseError(context={"task_id": str(task_id)})

        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError(message="Task not found or not authorized")
        return task

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error during task %s: %s", operation, str(e))
            raise DatabaseError(context={"operation": operation})

    async def create_task(self, db: AsyncSession, user_id: UUID, payload: TaskCreate) -> TaskResponse:
        if not payload.title:
            raise ValidationError(message="Title is required", field="title")

        task = Task(
            user_id=user_id,
            title=_validate_title(payload.title),
            description=payload.description,
            completed=payload.completed,
        )
        db.add(task)
        await self._flush(db, "create")
        logger.info("Task %s created for user %s", task.id, user_id)
        return TaskResponse.model_validate(task)

    async def list_tasks(self, db: AsyncSession, user_id: UUID) -> List[TaskResponse]:
        """Newest first."""
        try:
            result = await db.execute(
                select(Task).where(Task.user_id == user_id).order_by(desc(Task.created_at))
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing tasks: %s", str(e))
            raise DatabaseError(context={"operation": "list"})
        return [TaskResponse.model_validate(task) for task in result.scalars().all()]

    async def get_task(self, db: AsyncSession, user_id: UUID, task_id: UUID) -> TaskResponse:
        return TaskResponse.model_validate(await self._get_owned(db, user_id, task_id))

    async def update_task(
        self, db: AsyncSession, user_id: UUID, task_id: UUID, payload: TaskUpdate
    ) -> TaskResponse:
        """Applies only the fields present in the request body."""
        task = await self._get_owned(db, user_id, task_id)
        changes = payload.model_dump(exclude_unset=True)

        if "title" in changes:
            if not changes["title"]:
                raise ValidationError(message="Title is required", field="title")
            task.title = _validate_title(changes["title"])
        if "description" in changes:
            task.description = changes["description"]
        if changes.get("completed") is not None:
            task.completed = changes["completed"]

        await self._flush(db, "update")
        return TaskResponse.model_validate(task)

    async def toggle_task(self, db: AsyncSession, user_id: UUID, task_id: UUID) -> TaskResponse:
        task = await self._get_owned(db, user_id, task_id)
        task.completed = not task.completed
        await self._flush(db, "toggle")
        logger.info("Task %s toggled to completed=%s", task.id, task.completed)
        return TaskResponse.model_validate(task)

    async def delete_task(self, db: AsyncSession, user_id: UUID, task_id: UUID) -> TaskResponse:
        """Returns the deleted task."""
        task = await self._get_owned(db, user_id, task_id)
        deleted = TaskResponse.model_validate(task)
        await db.delete(task)
        await self._flush(db, "delete")
        return deleted

    async def delete_all_tasks(self, db: AsyncSession, user_id: UUID) -> int:
        try:
            result = await db.execute(delete(Task).where(Task.user_id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting tasks for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "delete_all"})
        logger.info("Deleted %d tasks for user %s", result.rowcount, user_id)
        return result.rowcount


task_service = TaskService()
