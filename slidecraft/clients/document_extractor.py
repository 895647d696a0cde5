"""
Document Extractor for SlideCraft

Turns an uploaded file into plain text for deck synthesis. PDFs are read
with pypdf; plain text and markdown are decoded as UTF-8.
"""

import io
from pathlib import PurePath
from typing import Optional

from pypdf import PdfReader

from config.settings import get_settings
from slidecraft.core.errors import DocumentParseError, ValidationError
from slidecraft.models.content import DocumentText
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}
TEXT_CONTENT_TYPES = {"text/plain", "text/markdown", "text/x-markdown"}
PDF_MAGIC = b"%PDF"


def _is_pdf(data: bytes, extension: str, content_type: str) -> bool:
    return extension == ".pdf" or content_type == "application/pdf" or data.startswith(PDF_MAGIC)


def _is_text(extension: str, content_type: str) -> bool:
    return extension in TEXT_EXTENSIONS or content_type in TEXT_CONTENT_TYPES


def extract_pdf_text(data: bytes) -> DocumentText:
    """Extract text from every page of a PDF, pages separated by newlines."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.error(f"PDF parse error: {type(e).__name__}: {e}")
        raise DocumentParseError("Failed to parse PDF") from e

    return DocumentText(text="\n".join(pages).strip(), page_count=len(pages))


def extract_document_text(
    data: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None
) -> DocumentText:
    """
    Extract plain text from an uploaded document.

    Args:
        data: Raw file bytes
        filename: Original filename, used for the extension
        content_type: MIME type sent by the client, if any

    Raises:
        ValidationError: no file, file too large, or unsupported format
        DocumentParseError: the file looked supported but could not be read
    """
    if not data:
        raise ValidationError("No file uploaded")

    settings = get_settings()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File too large: {len(data)} bytes (limit {settings.MAX_UPLOAD_BYTES})"
        )

    extension = PurePath(filename or "").suffix.lower()
    content_type = (content_type or "").split(";")[0].strip().lower()

    if _is_pdf(data, extension, content_type):
        result = extract_pdf_text(data)
    elif _is_text(extension, content_type):
        result = DocumentText(text=data.decode("utf-8", errors="replace").strip())
    else:
        logger.warning(f"Rejected upload '{filename}' ({content_type or 'unknown type'})")
        raise ValidationError(
            "Unsupported file format. Please upload a PDF, text or markdown file",
            details={"filename": filename, "content_type": content_type}
        )

    result.filename = filename
    logger.info(f"Extracted {len(result.text)} chars from '{filename}'")
    return result
