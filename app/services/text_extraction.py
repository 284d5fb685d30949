"""
LearnLoop Backend - Text Extraction
===================================

Turns an uploaded note file into plain text for summarization.

    .pdf  → pypdf, text of every page joined by newlines
    .txt  → UTF-8 decode (invalid bytes replaced)
    .docx → python-docx, paragraph text joined by newlines

PDF and DOCX parsing is CPU-bound, so it runs in a worker thread.
"""

import asyncio
import io
import logging
import zipfile

import docx
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from app.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _pdf_text(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx_text(content: bytes) -> str:
    document = docx.Document(io.BytesIO(content))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


async def extract_text(content: bytes, extension: str) -> str:
    """
    Extracts text by file extension (with or without the leading dot).

    Raises:
        ValidationError: unsupported extension or a file that cannot be parsed.
    """
    ext = extension.lower().lstrip(".")

    if ext == "txt":
        return content.decode("utf-8", errors="replace")

    if ext == "pdf":
        try:
            return await asyncio.to_thread(_pdf_text, content)
        except (PyPdfError, ValueError) as e:
            logger.warning("PDF extraction failed: %s", str(e))
            raise ValidationError(message="Could not read the uploaded PDF file", field="originalNote")

    if ext == "docx":
        try:
            return await asyncio.to_thread(_docx_text, content)
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
            logger.warning("DOCX extraction failed: %s", str(e))
            raise ValidationError(message="Could not read the uploaded DOCX file", field="originalNote")

    raise ValidationError(message="Unsupported file type", field="originalNote")
