"""
LearnLoop Backend - Note Routes
===============================

What:  Note summarization endpoints.
How:   Create and update take multipart form data (title, text,
       summaryLength, optional `originalNote` file). The file is read into
       memory here and handed to NoteService, which validates, extracts,
       stores and summarizes.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.middleware.auth import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse, DeleteCountResponse, ErrorResponse
from app.schemas.note import NoteResponse
from app.services.file_service import UploadedFile
from app.services.note_service import DEFAULT_SUMMARY_LENGTH, note_service

router = APIRouter(prefix="/notes", tags=["Notes"])

SUMMARIZE_RESPONSES = {
    400: {"description": "Invalid title, missing source or bad file", "model": ErrorResponse},
    429: {"description": "AI provider quota exhausted", "model": ErrorResponse},
    503: {"description": "AI service unavailable", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    # Browsers send an empty part with no filename when no file was chosen
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(filename=upload.filename, content=content, content_length=upload.size)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[NoteResponse],
    responses=SUMMARIZE_RESPONSES,
    summary="Summarize text or an uploaded file into a new note",
)
async def create_note(
    title: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    summary_length: str = Form(DEFAULT_SUMMARY_LENGTH, alias="summaryLength"),
    original_note: Optional[UploadFile] = File(None, alias="originalNote"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    upload = await _read_upload(original_note)
    note = await note_service.summarize_note(
        db,
        user.id,
        title=title,
        text=text,
        summary_length=summary_length,
        upload=upload,
    )
    return ApiResponse[NoteResponse].build(note, "Note summarized successfully", 201)


@router.get("", response_model=ApiResponse[List[NoteResponse]], responses=NOT_FOUND)
async def list_notes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    notes = await note_service.list_notes(db, user.id)
    return ApiResponse[List[NoteResponse]].build(notes, "Notes fetched successfully")


@router.delete("", response_model=ApiResponse[DeleteCountResponse])
async def delete_all_notes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    deleted = await note_service.delete_all_notes(db, user.id)
    return ApiResponse[DeleteCountResponse].build(
        DeleteCountResponse(deleted_count=deleted), "All notes deleted successfully"
    )


@router.get("/{note_id}", response_model=ApiResponse[NoteResponse], responses=NOT_FOUND)
async def get_note(
    note_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.get_note(db, user.id, note_id)
    return ApiResponse[NoteResponse].build(note, "Note fetched successfully")


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    responses={**SUMMARIZE_RESPONSES, **NOT_FOUND},
    summary="Re-summarize an existing note",
)
async def update_note(
    note_id: UUID,
    title: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    summary_length: str = Form(DEFAULT_SUMMARY_LENGTH, alias="summaryLength"),
    original_note: Optional[UploadFile] = File(None, alias="originalNote"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    upload = await _read_upload(original_note)
    note = await note_service.update_note(
        db,
        user.id,
        note_id,
        title=title,
        text=text,
        summary_length=summary_length,
        upload=upload,
    )
    return ApiResponse[NoteResponse].build(note, "Note updated successfully")


@router.delete("/{note_id}", response_model=ApiResponse[NoteResponse], responses=NOT_FOUND)
async def delete_note(
    note_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.delete_note(db, user.id, note_id)
    return ApiResponse[NoteResponse].build(note, "Note deleted successfully")
