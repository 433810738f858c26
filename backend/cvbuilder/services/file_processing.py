"""
Text extraction from uploaded CV files.

Supported types (by MIME type): PDF via pypdf, DOCX via python-docx and
plain text. Files are processed in memory and never written to disk.
"""

import logging
import uuid
from io import BytesIO
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from cvbuilder.errors import APIError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

ALLOWED_MIME_TYPES = (PDF_MIME, DOCX_MIME, TEXT_MIME)


def extract_pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    text_parts = []

    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)

    return "\n\n".join(text_parts)


def extract_docx_text(content: bytes) -> str:
    doc = Document(BytesIO(content))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    return "\n\n".join(parts)


def extract_plain_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


_EXTRACTORS = {
    PDF_MIME: extract_pdf_text,
    DOCX_MIME: extract_docx_text,
    TEXT_MIME: extract_plain_text,
}


def process_file(filename: str, content_type: str, content: bytes, max_bytes: int) -> dict:
    """
    Validate an upload and extract its text.

    Raises:
        APIError: 400 for an unsupported type or unreadable file,
                  413 when the file exceeds ``max_bytes``
    """
    # "text/plain; charset=utf-8" and friends
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_MIME_TYPES:
        raise APIError("Invalid file type. Only PDF, DOCX, and TXT files are allowed.", 400)

    if len(content) > max_bytes:
        raise APIError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.", 413)

    try:
        extracted_text = _EXTRACTORS[mime](content)
    except (PdfReadError, PackageNotFoundError, BadZipFile, ValueError, KeyError, OSError) as e:
        logger.warning(f"Text extraction failed for {filename} ({mime}): {e}")
        raise APIError(f"Could not read {mime} file: {e}", 400) from e

    file_id = f"file-{uuid.uuid4().hex[:12]}"
    logger.info(f"Processed upload {filename} as {file_id} ({len(extracted_text)} chars extracted)")

    return {
        "success": True,
        "fileId": file_id,
        "extractedText": extracted_text,
        "message": "File processed successfully",
    }
