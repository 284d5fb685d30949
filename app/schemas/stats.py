"""Per-user statistics schema."""

from app.schemas.common import CamelModel


class StatsResponse(CamelModel):
    total_notes: int
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    ai_learnings: int
