"""Learning guide request/response schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class LearningGuideCreate(CamelModel):
    topic: Optional[str] = Field(default=None, description="What to learn")
    duration_days: int = Field(default=7, description="Plan length, 1-7 days")


class DailyPlanEntry(CamelModel):
    day: int
    title: str
    description: str
    resources: List[str]


class LearningGuideResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    topic: str
    duration_days: int
    daily_plan: List[DailyPlanEntry]
    created_at: datetime
    updated_at: datetime


class LearningGuideSummary(CamelModel):
    """List item: the guide without owner and update metadata."""

    id: uuid.UUID
    topic: str
    duration_days: int
    daily_plan: List[DailyPlanEntry]
    created_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_guides: int
    has_next: bool
    has_prev: bool


class LearningGuideListResponse(CamelModel):
    guides: List[LearningGuideSummary]
    pagination: Pagination
