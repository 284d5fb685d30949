"""
LearnLoop Backend - Learning Guide SQLAlchemy Model
===================================================

What:  ORM model for AI-generated multi-day learning guides.
How:   The ordered daily plan is stored as a JSON list of
       {day, title, description, resources} objects on the guide row.

Invariant:
    Day numbers inside one guide are unique. The mapper hooks below run on
    every INSERT/UPDATE flush, so a violating guide is rejected before any
    SQL is emitted and never reaches the table.
"""

import uuid
from typing import Any, Dict, List

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin
from app.exceptions import AIResponseError


class LearningGuide(TimestampMixin, Base):
    __tablename__ = "learning_guides"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    topic: Mapped[str] = mapped_column(String(150), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_plan: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index("idx_learning_guides_user_created", "user_id", "created_at"),
        Index("idx_learning_guides_topic", "topic"),
    )

    def __repr__(self) -> str:
        return f"<LearningGuide(id={self.id}, topic='{self.topic}', days={self.duration_days})>"


def ensure_unique_days(mapper, connection, target: LearningGuide) -> None:
    """Rejects a guide whose daily plan repeats a day number."""
    days = [entry.get("day") for entry in target.daily_plan or []]
    if len(set(days)) != len(days):
        raise AIResponseError(
            message="Each day in the daily plan must be unique",
            context={"days": days},
        )


event.listen(LearningGuide, "before_insert", ensure_unique_days)
event.listen(LearningGuide, "before_update", ensure_unique_days)
