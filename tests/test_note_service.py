"""
LearnLoop Backend - Note Service Unit Tests
===========================================

NoteService with a mock DB session, a patched FileService and a patched
GeminiService.

What we test:
    ✅ Summary word ranges and prompt
    ✅ Validation happens before any external call
    ✅ Create from text and from a file; compensating cleanup on failure
    ✅ Update: old file deleted before the new upload
    ✅ Delete: one storage deletion, before the row deletion
    ✅ Owner scoping and the empty-list 404
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from app.exceptions import LLMServiceError, NotFoundError, ValidationError
from app.models.note import Note
from app.services.file_service import UploadedFile
from app.services.note_service import (
    NoteService,
    build_summary_prompt,
    get_summary_word_count,
)

STORED_URL = "http://testserver/api/v1/files/notes/2026/10/19/abc.txt"


@contextmanager
def patched_services(summary="Short summary.", extracted="Extracted file text"):
    with patch("app.services.note_service.file_service") as mock_file, \
         patch("app.services.note_service.gemini_service") as mock_gemini, \
         patch("app.services.note_service.extract_text", new=AsyncMock(return_value=extracted)) as mock_extract:
        mock_file.validate_upload = MagicMock(return_value=".txt")
        mock_file.validate_extension = MagicMock(return_value=".txt")
        mock_file.store_file = AsyncMock(return_value=STORED_URL)
        mock_file.is_managed = MagicMock(return_value=True)
        mock_file.delete_file = AsyncMock()
        mock_file.cleanup_file = AsyncMock()
        mock_gemini.generate_text = AsyncMock(return_value=summary)
        yield mock_file, mock_gemini, mock_extract


def make_note(user_id, original_note="", text="Stored text"):
    now = datetime.now(timezone.utc)
    return Note(
        id=uuid4(),
        user_id=user_id,
        title="Biology",
        text=text,
        original_note=original_note,
        summarized_note="Old summary",
        downloaded_pdf=False,
        created_at=now,
        updated_at=now,
    )


class TestSummaryWordCount:

    def test_tiers(self):
        assert get_summary_word_count("short") == "100-120"
        assert get_summary_word_count("medium") == "150-200"
        assert get_summary_word_count("long") == "180-200"

    @pytest.mark.parametrize("tier", ["huge", "", None])
    def test_unknown_tier_uses_medium_range(self, tier):
        assert get_summary_word_count(tier) == "150-200"

    def test_prompt(self):
        assert build_summary_prompt("Body", "100-120") == (
            "Summarize the following text in approximately 100-120 words:\n\nBody"
        )


class TestCreateNote:

    def setup_method(self):
        self.service = NoteService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_create_from_text(self, mock_db_session):
        with patched_services() as (mock_file, mock_gemini, _):
            result = await self.service.summarize_note(
                mock_db_session, self.user_id, title="Biology", text="Cells divide.", summary_length="short"
            )

        assert result.user_id == self.user_id
        assert result.summarized_note == "Short summary."
        assert result.original_note == ""
        assert result.downloaded_pdf is False
        mock_file.store_file.assert_not_awaited()
        prompt = mock_gemini.generate_text.call_args.args[0]
        assert "approximately 100-120 words" in prompt
        assert prompt.endswith("Cells divide.")

    @pytest.mark.asyncio
    async def test_create_from_file_extracts_and_uploads(self, mock_db_session):
        upload = UploadedFile(filename="lecture.txt", content=b"raw")
        with patched_services() as (mock_file, mock_gemini, mock_extract):
            result = await self.service.summarize_note(
                mock_db_session, self.user_id, title="Lecture", text=None, upload=upload
            )

        mock_extract.assert_awaited_once_with(b"raw", ".txt")
        mock_file.store_file.assert_awaited_once()
        assert result.original_note == STORED_URL
        assert result.text == "Extracted file text"

    @pytest.mark.parametrize("title", [None, "ab", "x" * 21])
    @pytest.mark.asyncio
    async def test_bad_title_rejected_before_external_calls(self, mock_db_session, title):
        with patched_services() as (mock_file, mock_gemini, _):
            with pytest.raises(ValidationError, match="between 3 and 20"):
                await self.service.summarize_note(mock_db_session, self.user_id, title=title, text="Body")

        mock_gemini.generate_text.assert_not_awaited()
        mock_file.store_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_text_and_file_rejected(self, mock_db_session):
        with patched_services() as (_, mock_gemini, _):
            with pytest.raises(ValidationError, match="File or text is required"):
                await self.service.summarize_note(mock_db_session, self.user_id, title="Biology", text="  ")
        mock_gemini.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_extracted_text_rejected(self, mock_db_session):
        upload = UploadedFile(filename="blank.txt", content=b"   ")
        with patched_services(extracted="   ") as (mock_file, mock_gemini, _):
            with pytest.raises(ValidationError):
                await self.service.summarize_note(
                    mock_db_session, self.user_id, title="Blank", text=None, upload=upload
                )
        mock_file.store_file.assert_not_awaited()
        mock_gemini.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_summary_failure_deletes_uploaded_file(self, mock_db_session):
        upload = UploadedFile(filename="lecture.txt", content=b"raw")
        with patched_services() as (mock_file, mock_gemini, _):
            mock_gemini.generate_text.side_effect = LLMServiceError()
            with pytest.raises(LLMServiceError):
                await self.service.summarize_note(
                    mock_db_session, self.user_id, title="Lecture", text=None, upload=upload
                )

        mock_file.cleanup_file.assert_awaited_once_with(STORED_URL)
        mock_db_session.add.assert_not_called()


class TestReadNotes:

    def setup_method(self):
        self.service = NoteService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_empty_list_is_not_found(self, mock_db_session):
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = []

        with pytest.raises(NotFoundError, match="No notes found for this user"):
            await self.service.list_notes(mock_db_session, self.user_id)

    @pytest.mark.asyncio
    async def test_get_is_owner_scoped(self, mock_db_session):
        note_id = uuid4()
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.get_note(mock_db_session, self.user_id, note_id)

        statement = mock_db_session.execute.call_args.args[0]
        params = statement.compile().params.values()
        assert self.user_id in params
        assert note_id in params


class TestUpdateNote:

    def setup_method(self):
        self.service = NoteService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_text_defaults_to_stored_text(self, mock_db_session):
        note = make_note(self.user_id, text="Stored text")
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        with patched_services(summary="New summary") as (mock_file, mock_gemini, _):
            result = await self.service.update_note(
                mock_db_session, self.user_id, note.id, title="Renamed", text=None
            )

        assert result.title == "Renamed"
        assert result.summarized_note == "New summary"
        assert mock_gemini.generate_text.call_args.args[0].endswith("Stored text")
        mock_file.delete_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_new_file_replaces_old_one(self, mock_db_session):
        old_url = "http://testserver/api/v1/files/notes/2026/01/01/old.txt"
        note = make_note(self.user_id, original_note=old_url)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
        upload = UploadedFile(filename="new.txt", content=b"new")

        calls = []
        with patched_services() as (mock_file, _, _):
            mock_file.delete_file.side_effect = lambda url: calls.append(("delete", url))
            mock_file.store_file.side_effect = lambda *a, **kw: calls.append(("store",)) or STORED_URL
            result = await self.service.update_note(
                mock_db_session, self.user_id, note.id, title="Biology", text=None, upload=upload
            )

        assert calls == [("delete", old_url), ("store",)]
        assert result.original_note == STORED_URL

    @pytest.mark.asyncio
    async def test_foreign_note_is_not_found(self, mock_db_session):
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = None

        with patched_services() as (_, mock_gemini, _):
            with pytest.raises(NotFoundError):
                await self.service.update_note(
                    mock_db_session, self.user_id, uuid4(), title="Biology", text="x"
                )
        mock_gemini.generate_text.assert_not_awaited()


class TestDeleteNote:

    def setup_method(self):
        self.service = NoteService()
        self.user_id = uuid4()

    @pytest.mark.asyncio
    async def test_storage_deleted_once_before_row(self, mock_db_session):
        note = make_note(self.user_id, original_note=STORED_URL)
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        calls = []
        mock_db_session.delete.side_effect = lambda obj: calls.append("db")
        with patched_services() as (mock_file, _, _):
            mock_file.delete_file.side_effect = lambda url: calls.append("storage")
            await self.service.delete_note(mock_db_session, self.user_id, note.id)

        assert calls == ["storage", "db"]
        mock_file.delete_file.assert_awaited_once_with(STORED_URL)

    @pytest.mark.asyncio
    async def test_text_note_skips_storage(self, mock_db_session):
        note = make_note(self.user_id, original_note="")
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        with patched_services() as (mock_file, _, _):
            await self.service.delete_note(mock_db_session, self.user_id, note.id)

        mock_file.delete_file.assert_not_awaited()
        mock_db_session.delete.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_unmanaged_file_reference_does_not_block_delete(self, mock_db_session):
        note = make_note(self.user_id, original_note="https://old-host.example.com/files/notes/a.txt")
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note

        with patched_services() as (mock_file, _, _):
            mock_file.is_managed.return_value = False
            result = await self.service.delete_note(mock_db_session, self.user_id, note.id)

        assert result.id == note.id
        mock_file.delete_file.assert_not_awaited()
        mock_db_session.delete.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_delete_all_skips_unmanaged_references(self, mock_db_session):
        foreign_url = "https://old-host.example.com/files/notes/a.txt"
        listed = MagicMock()
        listed.scalars.return_value.all.return_value = [foreign_url, STORED_URL]
        mock_db_session.execute = AsyncMock(side_effect=[listed, MagicMock(rowcount=2)])

        with patched_services() as (mock_file, _, _):
            mock_file.is_managed.side_effect = lambda url: url == STORED_URL
            deleted = await self.service.delete_all_notes(mock_db_session, self.user_id)

        assert deleted == 2
        mock_file.delete_file.assert_awaited_once_with(STORED_URL)
