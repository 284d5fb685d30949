"""
LearnLoop Backend - Note Schemas
================================

Notes are created from multipart form data (title, text, summaryLength and
an optional `originalNote` file), so there is no JSON request model; the
form fields are declared on the route and validated in NoteService.
"""

import uuid
from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class NoteResponse(CamelModel):
    """
    Full representation of a summarized note.

    original_note is the storage URL of the uploaded file, or an empty
    string for notes created from raw text.
    """

    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    user_id: uuid.UUID = Field(description="Owner")
    title: str = Field(description="Note title (3-20 chars)")
    text: str = Field(description="Text the summary was generated from")
    original_note: str = Field(default="", description="Storage URL of the uploaded file")
    summarized_note: str = Field(description="AI-generated summary")
    downloaded_pdf: bool = Field(default=False)
    created_at: datetime
    updated_at: datetime
