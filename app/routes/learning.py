"""
LearnLoop Backend - AI Learning Guide Routes
============================================

Generation can take several seconds (one Gemini call); listing is paginated
with page/limit query parameters.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.auth import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse, DeleteCountResponse, ErrorResponse
from app.schemas.learning import (
    LearningGuideCreate,
    LearningGuideListResponse,
    LearningGuideResponse,
)
from app.services.learning_service import learning_service

router = APIRouter(prefix="/ai", tags=["AI Learning"])

NOT_FOUND = {404: {"description": "Learning guide not found", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[LearningGuideResponse],
    responses={
        400: {"description": "Missing topic or duration out of range", "model": ErrorResponse},
        500: {"description": "AI response unusable", "model": ErrorResponse},
        503: {"description": "AI service unavailable", "model": ErrorResponse},
    },
    summary="Generate a multi-day learning roadmap",
)
async def create_guide(
    payload: LearningGuideCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    guide = await learning_service.create_guide(db, user.id, payload)
    return ApiResponse[LearningGuideResponse].build(guide, "Learning roadmap created successfully", 201)


@router.get("", response_model=ApiResponse[LearningGuideListResponse])
async def list_guides(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=10, ge=1, le=100, description="Guides per page"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    result = await learning_service.list_guides(db, user.id, page=page, limit=limit)
    return ApiResponse[LearningGuideListResponse].build(result, "Learning guides fetched successfully")


@router.delete("/user/all", response_model=ApiResponse[DeleteCountResponse])
async def delete_all_guides(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    deleted = await learning_service.delete_all_guides(db, user.id)
    return ApiResponse[DeleteCountResponse].build(
        DeleteCountResponse(deleted_count=deleted), "All learning guides deleted successfully"
    )


@router.get("/{guide_id}", response_model=ApiResponse[LearningGuideResponse], responses=NOT_FOUND)
async def get_guide(
    guide_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    guide = await learning_service.get_guide(db, user.id, guide_id)
    return ApiResponse[LearningGuideResponse].build(guide, "Learning guide fetched successfully")


@router.delete("/{guide_id}", response_model=ApiResponse[LearningGuideResponse], responses=NOT_FOUND)
async def delete_guide(
    guide_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    guide = await learning_service.delete_guide(db, user.id, guide_id)
    return ApiResponse[LearningGuideResponse].build(guide, "Learning guide deleted successfully")
