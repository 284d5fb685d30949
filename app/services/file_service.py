"""
LearnLoop Backend - File Storage Service
========================================

What:  Upload validation plus the object store for original note files.
How:   Validates extension and size, stores content in date-organized
       directories under a UUID filename, and addresses every stored file by
       its public URL (`{STORAGE_PUBLIC_URL}/{folder}/YYYY/MM/DD/<uuid>.<ext>`).
       Deletion takes the same URL and maps it back to a path.
Who:   Called by NoteService (upload, replace, delete) and by the files route.

Security Model:
    1. Extension allow-list: pdf, txt, docx
    2. Size limit checked against Content-Length and actual byte count
    3. UUID filenames: no user input reaches the file system path
    4. Every path derived from a URL is resolved and checked to stay inside
       the storage root (rejects ../ traversal)
"""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".txt", ".docx"}


@dataclass
class UploadedFile:
    """An upload read into memory by the route handler."""

    filename: str
    content: bytes
    content_length: Optional[int] = None


class FileService:
    """
    Manages upload validation and the stored-file lifecycle.

    Directory Structure:
        storage/
        └── notes/
            └── 2024/
                └── 01/
                    └── 15/
                        ├── a1b2c3d4-....pdf
                        └── e5f6g7h8-....docx
    """

    def __init__(self, storage_root: Optional[str] = None, public_url: Optional[str] = None):
        """
        Args:
            storage_root: Override the storage path (used in tests).
            public_url: Override the public base URL (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.public_url = (public_url or settings.storage_public_url).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).

        Raises:
            ValidationError if the extension is not pdf, txt or docx.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Unsupported file type",
                field="originalNote",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks Content-Length first, then the actual byte count.

        Raises:
            ValidationError for empty or oversized files.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="originalNote")

        if (content_length and content_length > settings.max_file_size) or (
            actual_size > settings.max_file_size
        ):
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="originalNote",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_upload(self, upload: UploadedFile) -> str:
        """Extension then size. Returns the extension."""
        ext = self.validate_extension(upload.filename)
        self.validate_size(upload.content_length, len(upload.content))
        return ext

    # ── Paths & URLs ──────────────────────────────────────────────────────

    def _generate_storage_path(self, folder: str, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new `folder/YYYY/MM/DD/<uuid><ext>` file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{folder}/{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def url_for(self, relative_path: str) -> str:
        return f"{self.public_url}/{relative_path}"

    def resolve_relative_path(self, relative_path: str) -> Path:
        """
        Maps a relative storage path to an absolute one inside the root.

        Raises:
            ValidationError if the path escapes the storage root.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path")
        return full_path

    def is_managed(self, url: str) -> bool:
        """True if `url` was issued by this store under the current public URL."""
        return url.startswith(f"{self.public_url}/")

    def path_from_url(self, url: str) -> Path:
        """
        Maps a storage URL produced by `url_for` back to its absolute path.

        Raises:
            FileStorageError if the URL was not issued by this store.
        """
        if not self.is_managed(url):
            raise FileStorageError(
                message="Stored file reference is not managed by this service",
                context={"url": url},
            )
        return self.resolve_relative_path(url[len(self.public_url) + 1:])

    # ── Storage Operations ────────────────────────────────────────────────

    async def store_file(self, content: bytes, extension: str, folder: str = "notes") -> str:
        """
        Writes validated content to disk and returns its public URL.

        Raises:
            FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(folder, extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return self.url_for(relative_path)

    async def delete_file(self, url: str) -> None:
        """
        Deletes a stored file by URL. A file that is already gone is not an error.

        Raises:
            FileStorageError if the URL is foreign or the OS refuses the delete.
        """
        path = self.path_from_url(url)
        try:
            os.remove(path)
            logger.info("Deleted stored file: %s", path.name)
        except FileNotFoundError:
            logger.debug("Stored file already gone: %s", path.name)
        except OSError as e:
            logger.error("Failed to delete stored file %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to delete the stored file",
                context={"path": str(path), "os_error": str(e)},
            )

    async def cleanup_file(self, url: str) -> None:
        """
        Best-effort removal of a file uploaded by a request that later failed.

        Errors are logged, never raised: the original failure is the one the
        client needs to see.
        """
        try:
            await self.delete_file(url)
        except (FileStorageError, ValidationError) as e:
            logger.warning("Failed to clean up file %s: %s", url, e.message)


file_service = FileService()
