"""Stats counters, including the derived pending count."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.services.stats_service import StatsService


def count(value):
    result = MagicMock()
    result.scalar_one.return_value = value
    return result


@pytest.mark.asyncio
async def test_stats_for_user(mock_db_session):
    user_id = uuid4()
    # notes, tasks, completed tasks, learning guides
    mock_db_session.execute = AsyncMock(side_effect=[count(4), count(10), count(7), count(2)])

    stats = await StatsService().get_stats(mock_db_session, user_id)

    assert stats.total_notes == 4
    assert stats.total_tasks == 10
    assert stats.completed_tasks == 7
    assert stats.pending_tasks == 3
    assert stats.ai_learnings == 2
    for call in mock_db_session.execute.call_args_list:
        assert user_id in call.args[0].compile().params.values()
