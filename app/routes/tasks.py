"""
LearnLoop Backend - Task Routes
===============================

Owner-scoped task CRUD. Every route requires authentication; a task owned
by another user answers 404 exactly like a missing one.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.auth import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse, DeleteCountResponse, ErrorResponse
from app.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from app.services.task_service import task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])

NOT_FOUND = {404: {"description": "Task not found or not authorized", "model": ErrorResponse}}


@router.post("", status_code=201, response_model=ApiResponse[TaskResponse])
async def create_task(
    payload: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    task = await task_service.create_task(db, user.id, payload)
    return ApiResponse[TaskResponse].build(task, "Task created successfully", 201)


@router.get("", response_model=ApiResponse[List[TaskResponse]])
async def list_tasks(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    tasks = await task_service.list_tasks(db, user.id)
    return ApiResponse[List[TaskResponse]].build(tasks, "Tasks fetched successfully")


@router.delete("", response_model=ApiResponse[DeleteCountResponse])
async def delete_all_tasks(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    deleted = await task_service.delete_all_tasks(db, user.id)
    return ApiResponse[DeleteCountResponse].build(
        DeleteCountResponse(deleted_count=deleted), "All tasks deleted successfully"
    )


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse], responses=NOT_FOUND)
async def get_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    task = await task_service.get_task(db, user.id, task_id)
    return ApiResponse[TaskResponse].build(task, "Task fetched successfully")


@router.patch("/{task_id}", response_model=ApiResponse[TaskResponse], responses=NOT_FOUND)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    task = await task_service.update_task(db, user.id, task_id, payload)
    return ApiResponse[TaskResponse].build(task, "Task updated successfully")


@router.patch("/{task_id}/toggle", response_model=ApiResponse[TaskResponse], responses=NOT_FOUND)
async def toggle_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    task = await task_service.toggle_task(db, user.id, task_id)
    return ApiResponse[TaskResponse].build(task, "Task status toggled successfully")


@router.delete("/{task_id}", response_model=ApiResponse[TaskResponse], responses=NOT_FOUND)
async def delete_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    task = await task_service.delete_task(db, user.id, task_id)
    return ApiResponse[TaskResponse].build(task, "Task deleted successfully")
