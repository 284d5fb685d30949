"""
LearnLoop Backend - Note SQLAlchemy Model
=========================================

What:  ORM model for the `notes` table.
Who:   Used by NoteService for create/update/delete and by StatsService.

Table Design:
    - text: full extracted text (the summarization input), no length limit
    - original_note: storage URL of the uploaded file, empty for raw-text notes
    - summarized_note: the AI-generated summary
    - downloaded_pdf: client-side flag, always created as False

    Index on (user_id, created_at):
        The only list query is "this user's notes, newest first".
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin


class Note(TimestampMixin, Base):
    """
    A summarized note.

    Lifecycle:
        1. Created after text extraction, file upload and summarization
        2. Updated in place on re-summarization (file replaced only if a new
           one is uploaded)
        3. Deleted individually (stored file removed first) or in bulk
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(20), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    original_note: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    summarized_note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    downloaded_pdf: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_notes_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
