"""Serves stored note uploads by their storage path."""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse
from app.services.file_service import file_service

router = APIRouter(prefix="/files", tags=["Files"])


@router.get(
    "/{file_path:path}",
    summary="Download an uploaded note file",
    responses={
        400: {"description": "Path escapes the storage root", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    full_path = file_service.resolve_relative_path(file_path)
    if not full_path.is_file():
        raise NotFoundError(message="File not found")

    # Content type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        filename=full_path.name,
        headers={"Cache-Control": "private, max-age=86400"},
    )
