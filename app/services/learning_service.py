"""
LearnLoop Backend - Learning Guide Service
==========================================

What:  Generates multi-day learning roadmaps with Gemini and manages the
       stored guides (paginated list, get, delete, delete all).
How:   A fixed prompt asks for `{"dailyPlan": [...]}` JSON. The first
       `{...}` block of the answer is parsed, each entry is normalized with
       logged fallbacks, and the guide is persisted. The model's
       unique-days hook rejects plans that repeat a day number.
Who:   Called by the /api/v1/ai route handlers.

Nothing is persisted when the AI answer is unusable.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import AIResponseError, DatabaseError, NotFoundError, ValidationError
from app.models.learning_guide import LearningGuide
from app.schemas.learning import (
    LearningGuideCreate,
    LearningGuideListResponse,
    LearningGuideResponse,
    LearningGuideSummary,
    Pagination,
)
from app.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 7
MIN_TOPIC_LENGTH = 3
MAX_TOPIC_LENGTH = 150

# Greedy: from the first "{" to the last "}" of the answer
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

DEFAULT_DESCRIPTION = "Learning objectives for the day"
DEFAULT_RESOURCES = ["General reading", "Online tutorials"]

ROADMAP_PROMPT = """You are an expert roadmap planner. Create a structured {days}-day learning roadmap for the topic "{topic}".

Respond strictly in this JSON format, no extra explanation or intro text:

```json
{{
  "dailyPlan": [
    {{
      "day": 1,
      "title": "Day 1: Introduction",
      "description": "Brief overview of the topic...",
      "resources": ["YouTube video", "Official Docs", "Practice Exercise"]
    }},
    ...
  ]
}}
```
Ensure the learning builds progressively across the {days} days."""


def build_roadmap_prompt(topic: str, duration_days: int) -> str:
    return ROADMAP_PROMPT.format(topic=topic, days=duration_days)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parses the first-to-last brace span of an AI answer.

    Raises:
        AIResponseError: no braces, or the span is not valid JSON.
    """
    match = JSON_OBJECT_PATTERN.search(text)
    if match is None:
        raise AIResponseError(message="Failed to parse AI response into JSON")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("AI response is not valid JSON: %s", str(e))
        raise AIResponseError(message="Failed to parse AI response into JSON")


def _coerce_day(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, str) and value.strip().isdecimal() and int(value) > 0:
        return int(value)
    return None


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_daily_plan(raw_plan: List[Any]) -> List[Dict[str, Any]]:
    """
    Fills missing or malformed entry fields with defaults.

        day         → 1-based position
        title       → "Day N"
        description → "Learning objectives for the day"
        resources   → ["General reading", "Online tutorials"]

    Every substitution is logged at WARNING.
    """
    plan = []
    for index, entry in enumerate(raw_plan):
        position = index + 1
        if not isinstance(entry, dict):
            entry = {}

        fallbacks = []

        day = _coerce_day(entry.get("day"))
        if day is None:
            day = position
            fallbacks.append("day")

        title = _non_empty_str(entry.get("title"))
        if title is None:
            title = f"Day {position}"
            fallbacks.append("title")

        description = _non_empty_str(entry.get("description"))
        if description is None:
            description = DEFAULT_DESCRIPTION
            fallbacks.append("description")

        resources = entry.get("resources")
        if isinstance(resources, list):
            resources = [str(resource) for resource in resources]
        else:
            resources = list(DEFAULT_RESOURCES)
            fallbacks.append("resources")

        if fallbacks:
            logger.warning(
                "AI plan entry %d missing or invalid %s; using defaults",
                position,
                ", ".join(fallbacks),
            )

        plan.append(
            {"day": day, "title": title, "description": description, "resources": resources}
        )
    return plan


class LearningService:
    async def _get_owned(self, db: AsyncSession, user_id: UUID, guide_id: UUID) -> LearningGuide:
        try:
            result = await db.execute(
                select(LearningGuide).where(
                    LearningGuide.id == guide_id, LearningGuide.user_id == user_id
                )
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching learning guide %s: %s", guide_id, str(e))
            raise DatabaseError(context={"guide_id": str(guide_id)})

        guide = result.scalar_one_or_none()
        if guide is None:
            raise NotFoundError(message="Learning guide not found")
        return guide

    async def create_guide(
        self, db: AsyncSession, user_id: UUID, payload: LearningGuideCreate
    ) -> LearningGuideResponse:
        """
        Generates and stores a roadmap.

        Raises:
            ValidationError: missing topic or duration outside 1-7
            AIResponseError: empty, unparseable or structurally invalid answer,
                or a plan with repeated day numbers
            LLMServiceError / UpstreamRateLimitError: Gemini failed
        """
        topic = (payload.topic or "").strip()
        if not topic:
            raise ValidationError(message="Topic is required", field="topic")

        duration_days = payload.duration_days
        if not MIN_DURATION_DAYS <= duration_days <= MAX_DURATION_DAYS:
            raise ValidationError(
                message=f"Duration must be between {MIN_DURATION_DAYS} and {MAX_DURATION_DAYS} days",
                field="durationDays",
            )
        if not MIN_TOPIC_LENGTH <= len(topic) <= MAX_TOPIC_LENGTH:
            raise ValidationError(
                message=f"Topic must be between {MIN_TOPIC_LENGTH} and {MAX_TOPIC_LENGTH} characters",
                field="topic",
            )

        answer = await gemini_service.generate_text(
            build_roadmap_prompt(topic, duration_days),
            max_output_tokens=settings.learning_max_output_tokens,
            temperature=settings.learning_temperature,
        )

        parsed = extract_json_object(answer)
        raw_plan = parsed.get("dailyPlan") if isinstance(parsed, dict) else None
        if not isinstance(raw_plan, list):
            raise AIResponseError(message="Invalid roadmap structure received from AI")

        guide = LearningGuide(
            user_id=user_id,
            topic=topic,
            duration_days=duration_days,
            daily_plan=normalize_daily_plan(raw_plan),
        )
        db.add(guide)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving learning guide: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_guide"})

        logger.info(
            "Learning guide %s created for user %s (%d days)", guide.id, user_id, len(guide.daily_plan)
        )
        return LearningGuideResponse.model_validate(guide)

    async def list_guides(
        self, db: AsyncSession, user_id: UUID, page: int = 1, limit: int = 10
    ) -> LearningGuideListResponse:
        """Newest first, offset pagination."""
        skip = (page - 1) * limit
        try:
            total = (
                await db.execute(
                    select(func.count())
                    .select_from(LearningGuide)
                    .where(LearningGuide.user_id == user_id)
                )
            ).scalar_one()
            result = await db.execute(
                select(LearningGuide)
                .where(LearningGuide.user_id == user_id)
                .order_by(desc(LearningGuide.created_at))
                .offset(skip)
                .limit(limit)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing learning guides: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_guides"})

        guides = [LearningGuideSummary.model_validate(guide) for guide in result.scalars().all()]
        return LearningGuideListResponse(
            guides=guides,
            pagination=Pagination(
                current_page=page,
                total_pages=math.ceil(total / limit),
                total_guides=total,
                has_next=skip + len(guides) < total,
                has_prev=page > 1,
            ),
        )

    async def get_guide(self, db: AsyncSession, user_id: UUID, guide_id: UUID) -> LearningGuideResponse:
        return LearningGuideResponse.model_validate(await self._get_owned(db, user_id, guide_id))

    async def delete_guide(self, db: AsyncSession, user_id: UUID, guide_id: UUID) -> LearningGuideResponse:
        guide = await self._get_owned(db, user_id, guide_id)
        deleted = LearningGuideResponse.model_validate(guide)
        await db.delete(guide)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting learning guide %s: %s", guide_id, str(e))
            raise DatabaseError(context={"operation": "delete_guide"})
        return deleted

    async def delete_all_guides(self, db: AsyncSession, user_id: UUID) -> int:
        try:
            result = await db.execute(delete(LearningGuide).where(LearningGuide.user_id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting learning guides for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "delete_all_guides"})
        logger.info("Deleted %d learning guides for user %s", result.rowcount, user_id)
        return result.rowcount


learning_service = LearningService()
