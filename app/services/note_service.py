"""
LearnLoop Backend - Note Service (Business Logic Orchestrator)
==============================================================

What:  Orchestrates extract → upload → summarize → persist for notes, plus
       owner-scoped reads, updates and deletes.
How:   Composes text extraction, FileService, GeminiService and the
       request's database session.
Who:   Called by the notes route handlers.

Orchestration Flow (POST /api/v1/notes):
    ┌──────────┐    ┌────────────┐    ┌───────────┐    ┌────────────┐    ┌────────┐
    │ Validate │───▶│  Extract   │───▶│  Upload   │───▶│ Summarize  │───▶│ Store  │
    │ (input)  │    │  (pdf/txt/ │    │ (FileServ)│    │ (Gemini)   │    │ (DB)   │
    └──────────┘    │   docx)    │    └───────────┘    └────────────┘    └────────┘
                    └────────────┘

    All validation happens before any external call. If summarization or the
    insert fails after the upload, the uploaded file is deleted again.

Update replaces the stored file only when a new one is supplied: the old file
is deleted first, then the new one is uploaded.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.note import Note
from app.schemas.note import NoteResponse
from app.services.file_service import UploadedFile, file_service
from app.services.gemini_service import gemini_service
from app.services.text_extraction import extract_text

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 20

SUMMARY_WORD_COUNTS = {
    "short": "100-120",
    "medium": "150-200",
    "long": "180-200",
}
DEFAULT_SUMMARY_LENGTH = "medium"


def get_summary_word_count(summary_length: Optional[str]) -> str:
    """Maps a summary tier to its target word range; unknown tiers get the medium range."""
    return SUMMARY_WORD_COUNTS.get(summary_length or "", SUMMARY_WORD_COUNTS[DEFAULT_SUMMARY_LENGTH])


def build_summary_prompt(text: str, word_count: str) -> str:
    return f"Summarize the following text in approximately {word_count} words:\n\n{text}"


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Database errors are wrapped in DatabaseError (details logged only).
        Service errors (ValidationError, LLMServiceError, ...) propagate with
        their original type.
    """

    # ── Helpers ───────────────────────────────────────────────────────────

    def _validate_request(
        self,
        title: Optional[str],
        text: Optional[str],
        upload: Optional[UploadedFile],
        require_source: bool = True,
    ) -> str:
        title = (title or "").strip()
        if not MIN_TITLE_LENGTH <= len(title) <= MAX_TITLE_LENGTH:
            raise ValidationError(
                message=f"Title must be between {MIN_TITLE_LENGTH} and {MAX_TITLE_LENGTH} characters",
                field="title",
            )
        if require_source and upload is None and not (text and text.strip()):
            raise ValidationError(message="File or text is required for summarization")
        if upload is not None:
            file_service.validate_upload(upload)
        return title

    async def _summarize(self, text: str, summary_length: Optional[str]) -> str:
        if not text.strip():
            raise ValidationError(message="No text could be extracted for summarization")

        word_count = get_summary_word_count(summary_length)
        return await gemini_service.generate_text(
            build_summary_prompt(text, word_count),
            max_output_tokens=settings.summary_max_output_tokens,
            temperature=settings.summary_temperature,
        )

    async def _get_owned(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> Note:
        try:
            result = await db.execute(
                select(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(message="Note not found")
        return note

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error during note %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="An error occurred while saving your note. Please try again.",
                context={"operation": operation},
            )

    async def _delete_stored_file(self, url: str) -> None:
        """Deletes a stored upload; references outside the current storage are logged and left alone."""
        if not file_service.is_managed(url):
            logger.warning("Skipping deletion of unmanaged file reference: %s", url)
            return
        await file_service.delete_file(url)

    # ── Create ────────────────────────────────────────────────────────────

    async def summarize_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: Optional[str],
        text: Optional[str],
        summary_length: Optional[str] = DEFAULT_SUMMARY_LENGTH,
        upload: Optional[UploadedFile] = None,
    ) -> NoteResponse:
        """
        Creates a note from raw text or an uploaded file.

        Raises:
            ValidationError: bad title, no source, bad file, no extractable text
            LLMServiceError / UpstreamRateLimitError / AIResponseError: Gemini failed
            FileStorageError: upload failed
            DatabaseError: insert failed
        """
        title = self._validate_request(title, text, upload)

        source_text = text or ""
        file_url = ""
        if upload is not None:
            ext = file_service.validate_extension(upload.filename)
            source_text = await extract_text(upload.content, ext)
            if not source_text.strip():
                raise ValidationError(message="No text could be extracted from the uploaded file")
            file_url = await file_service.store_file(upload.content, ext, folder="notes")

        try:
            summary = await self._summarize(source_text, summary_length)
            note = Note(
                user_id=user_id,
                title=title,
                text=source_text,
                original_note=file_url,
                summarized_note=summary,
                downloaded_pdf=False,
            )
            db.add(note)
            await self._flush(db, "create")
        except Exception:
            if file_url:
                await file_service.cleanup_file(file_url)
            raise

        logger.info("Note %s created for user %s (%d chars summarized)", note.id, user_id, len(source_text))
        return NoteResponse.model_validate(note)

    # ── Read ──────────────────────────────────────────────────────────────

    async def list_notes(self, db: AsyncSession, user_id: UUID) -> List[NoteResponse]:
        """
        Newest first.

        Raises:
            NotFoundError: the user has no notes.
        """
        try:
            result = await db.execute(
                select(Note).where(Note.user_id == user_id).order_by(desc(Note.created_at))
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve notes. Please try again.")

        notes = result.scalars().all()
        if not notes:
            raise NotFoundError(message="No notes found for this user")
        return [NoteResponse.model_validate(note) for note in notes]

    async def get_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> NoteResponse:
        return NoteResponse.model_validate(await self._get_owned(db, user_id, note_id))

    # ── Update ────────────────────────────────────────────────────────────

    async def update_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        title: Optional[str],
        text: Optional[str],
        summary_length: Optional[str] = DEFAULT_SUMMARY_LENGTH,
        upload: Optional[UploadedFile] = None,
    ) -> NoteResponse:
        """
        Re-summarizes an existing note. Text defaults to the stored text; a new
        file replaces the stored one.
        """
        title = self._validate_request(title, text, upload, require_source=False)
        note = await self._get_owned(db, user_id, note_id)

        source_text = text if text and text.strip() else note.text
        file_url = note.original_note
        new_file_url = ""
        if upload is not None:
            ext = file_service.validate_extension(upload.filename)
            source_text = await extract_text(upload.content, ext)
            if not source_text.strip():
                raise ValidationError(message="No text could be extracted from the uploaded file")
            if note.original_note:
                await self._delete_stored_file(note.original_note)
            new_file_url = await file_service.store_file(upload.content, ext, folder="notes")
            file_url = new_file_url

        try:
            summary = await self._summarize(source_text, summary_length)
            note.title = title
            note.text = source_text
            note.original_note = file_url
            note.summarized_note = summary
            await self._flush(db, "update")
        except Exception:
            if new_file_url:
                await file_service.cleanup_file(new_file_url)
            raise

        logger.info("Note %s updated", note.id)
        return NoteResponse.model_validate(note)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> NoteResponse:
        """Deletes the stored file (if any), then the row. Returns the deleted note."""
        note = await self._get_owned(db, user_id, note_id)
        deleted = NoteResponse.model_validate(note)

        if note.original_note:
            await self._delete_stored_file(note.original_note)

        await db.delete(note)
        await self._flush(db, "delete")
        logger.info("Note %s deleted", note_id)
        return deleted

    async def delete_all_notes(self, db: AsyncSession, user_id: UUID) -> int:
        """Removes every note of the user and their stored files. Returns the count."""
        try:
            result = await db.execute(
                select(Note.original_note).where(Note.user_id == user_id, Note.original_note != "")
            )
            file_urls = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing note files: %s", str(e))
            raise DatabaseError(context={"operation": "delete_all"})

        for url in file_urls:
            await self._delete_stored_file(url)

        try:
            result = await db.execute(delete(Note).where(Note.user_id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting notes for user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "delete_all"})

        logger.info("Deleted %d notes (%d files) for user %s", result.rowcount, len(file_urls), user_id)
        return result.rowcount


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
