"""
LearnLoop Backend - Learning Guide Unit Tests
=============================================

JSON extraction, plan normalization and the create/list flows with a
patched Gemini service, plus the unique-days persistence hook run against
a real SQLite database.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.database import Base
from app.exceptions import AIResponseError, NotFoundError, ValidationError
from app.models.learning_guide import LearningGuide, ensure_unique_days
from app.models.user import User
from app.schemas.learning import LearningGuideCreate
from app.services.learning_service import (
    DEFAULT_RESOURCES,
    LearningService,
    build_roadmap_prompt,
    extract_json_object,
    normalize_daily_plan,
)

VALID_PLAN = {
    "dailyPlan": [
        {"day": 1, "title": "Basics", "description": "Syntax", "resources": ["Docs"]},
        {"day": 2, "title": "Types", "description": "Type system", "resources": ["Book"]},
    ]
}


class TestPrompt:

    def test_mentions_topic_and_duration(self):
        prompt = build_roadmap_prompt("Rust", 3)
        assert '3-day learning roadmap for the topic "Rust"' in prompt
        assert '"dailyPlan"' in prompt
        assert prompt.endswith("Ensure the learning builds progressively across the 3 days.")


class TestExtractJson:

    def test_object_wrapped_in_prose_and_fences(self):
        answer = "Sure!\n```json\n" + json.dumps(VALID_PLAN) + "\n```\nGood luck."
        assert extract_json_object(answer) == VALID_PLAN

    def test_no_braces(self):
        with pytest.raises(AIResponseError, match="Failed to parse AI response into JSON"):
            extract_json_object("I cannot help with that.")

    def test_invalid_json(self):
        with pytest.raises(AIResponseError, match="Failed to parse AI response into JSON"):
            extract_json_object("{dailyPlan: [oops}")


class TestNormalizeDailyPlan:

    def test_complete_entries_are_kept(self):
        assert normalize_daily_plan(VALID_PLAN["dailyPlan"]) == VALID_PLAN["dailyPlan"]

    def test_missing_fields_get_defaults_and_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.services.learning_service"):
            plan = normalize_daily_plan([{}, {"day": 0, "title": "", "resources": "a string"}])

        assert plan == [
            {
                "day": 1,
                "title": "Day 1",
                "description": "Learning objectives for the day",
                "resources": DEFAULT_RESOURCES,
            },
            {
                "day": 2,
                "title": "Day 2",
                "description": "Learning objectives for the day",
                "resources": DEFAULT_RESOURCES,
            },
        ]
        assert len([r for r in caplog.records if "using defaults" in r.getMessage()]) == 2

    @pytest.mark.parametrize("day", ["\u00b2", "3\u00b3", "-1", "1.5"])
    def test_non_decimal_day_falls_back_to_position(self, day):
        plan = normalize_daily_plan([{"day": day, "title": "T", "description": "D", "resources": []}])
        assert plan[0]["day"] == 1

    def test_numeric_string_day_is_parsed(self):
        plan = normalize_daily_plan([{"day": " 4 ", "title": "T", "description": "D", "resources": []}])
        assert plan[0]["day"] == 4

    def test_empty_resource_list_is_kept(self):
        plan = normalize_daily_plan([{"day": 1, "title": "T", "description": "D", "resources": []}])
        assert plan[0]["resources"] == []


class TestCreateGuide:

    def setup_method(self):
        self.service = LearningService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_success(self, mock_db_session):
        with patch("app.services.learning_service.gemini_service") as mock_gemini:
            mock_gemini.generate_text = AsyncMock(return_value=json.dumps(VALID_PLAN))
            result = await self.service.create_guide(
                mock_db_session, self.user_id, LearningGuideCreate(topic=" Rust ", duration_days=2)
            )

        assert result.topic == "Rust"
        assert result.user_id == self.user_id
        assert [entry.day for entry in result.daily_plan] == [1, 2]
        kwargs = mock_gemini.generate_text.call_args.kwargs
        assert kwargs["max_output_tokens"] == 2000
        assert kwargs["temperature"] == 0.7

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({}, "Topic is required"),
            ({"topic": "Rust", "duration_days": 0}, "Duration must be between 1 and 7 days"),
            ({"topic": "Rust", "duration_days": 8}, "Duration must be between 1 and 7 days"),
        ],
    )
    @pytest.mark.asyncio
    async def test_validation_precedes_ai_call(self, mock_db_session, payload, message):
        with patch("app.services.learning_service.gemini_service") as mock_gemini:
            mock_gemini.generate_text = AsyncMock()
            with pytest.raises(ValidationError, match=message):
                await self.service.create_guide(mock_db_session, self.user_id, LearningGuideCreate(**payload))
        mock_gemini.generate_text.assert_not_awaited()

    @pytest.mark.parametrize("answer", ['{"plan": []}', '{"dailyPlan": "day one"}'])
    @pytest.mark.asyncio
    async def test_missing_daily_plan_persists_nothing(self, mock_db_session, answer):
        with patch("app.services.learning_service.gemini_service") as mock_gemini:
            mock_gemini.generate_text = AsyncMock(return_value=answer)
            with pytest.raises(AIResponseError, match="Invalid roadmap structure received from AI"):
                await self.service.create_guide(
                    mock_db_session, self.user_id, LearningGuideCreate(topic="Rust")
                )
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()


class TestListGuides:

    @pytest.mark.asyncio
    async def test_pagination_metadata(self, mock_db_session):
        count_result = MagicMock()
        count_result.scalar_one.return_value = 25
        page_result = MagicMock()
        page_result.scalars.return_value.all.return_value = []
        mock_db_session.execute = AsyncMock(side_effect=[count_result, page_result])

        result = await LearningService().list_guides(mock_db_session, uuid4(), page=2, limit=10)

        assert result.pagination.total_guides == 25
        assert result.pagination.total_pages == 3
        assert result.pagination.current_page == 2
        assert result.pagination.has_prev is True


class TestGuideOwnership:

    def setup_method(self):
        self.service = LearningService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_foreign_guide_cannot_be_read(self, mock_db_session):
        guide_id = uuid4()
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with pytest.raises(NotFoundError, match="Learning guide not found"):
            await self.service.get_guide(mock_db_session, self.user_id, guide_id)

        params = mock_db_session.execute.call_args.args[0].compile().params.values()
        assert self.user_id in params
        assert guide_id in params

    @pytest.mark.asyncio
    async def test_foreign_guide_cannot_be_deleted(self, mock_db_session):
        guide_id = uuid4()
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with pytest.raises(NotFoundError, match="Learning guide not found"):
            await self.service.delete_guide(mock_db_session, self.user_id, guide_id)

        params = mock_db_session.execute.call_args.args[0].compile().params.values()
        assert self.user_id in params
        assert guide_id in params
        mock_db_session.delete.assert_not_awaited()
        mock_db_session.flush.assert_not_awaited()


class TestUniqueDaysHook:

    def test_duplicate_days_rejected(self):
        guide = LearningGuide(daily_plan=[{"day": 1}, {"day": 1}])
        with pytest.raises(AIResponseError, match="must be unique"):
            ensure_unique_days(None, None, guide)

    def test_distinct_days_pass(self):
        ensure_unique_days(None, None, LearningGuide(daily_plan=[{"day": 1}, {"day": 2}]))

    @pytest.mark.asyncio
    async def test_violating_guide_is_never_written(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'guides.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)

        try:
            async with session_factory() as session:
                user = User(name="Alice", email="alice@example.com", auth_provider="google")
                session.add(user)
                await session.commit()

                session.add(
                    LearningGuide(
                        user_id=user.id,
                        topic="Rust",
                        duration_days=2,
                        daily_plan=[{"day": 1}, {"day": 1}],
                    )
                )
                with pytest.raises(AIResponseError):
                    await session.flush()
                await session.rollback()

                count = await session.execute(select(func.count()).select_from(LearningGuide))
                assert count.scalar_one() == 0
        finally:
            await engine.dispose()
