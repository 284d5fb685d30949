"""Task request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class TaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    completed: bool = False


class TaskUpdate(CamelModel):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None


class TaskResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: datetime
    updated_at: datetime
