"""
Plain-text extraction from uploaded PDF documents.
"""

from __future__ import annotations

import base64
import io
import re

from loguru import logger
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

DEFAULT_TEXT_LIMIT = 30000
_MULTI_NEWLINE_RE = re.compile(r"(\r\n|\r|\n){2,}")


class PdfTextExtractionError(Exception):
    """Raised when a PDF cannot be read or contains no extractable text."""


def clean_pdf_text(raw_text: str, limit: int = DEFAULT_TEXT_LIMIT) -> str:
    """Collapse blank-line runs into single line breaks, trim and truncate."""
    collapsed = _MULTI_NEWLINE_RE.sub("\n", raw_text)
    return collapsed.strip()[:limit]


def extract_pdf_text(pdf_bytes: bytes, limit: int = DEFAULT_TEXT_LIMIT) -> str:
    """Extract cleaned text from PDF bytes.

    Raises:
        PdfTextExtractionError: If the document cannot be parsed or yields no text
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as e:
        raise PdfTextExtractionError(f"Could not read PDF: {e}") from e

    text = clean_pdf_text("\n".join(pages), limit)
    if not text:
        logger.warning(
            f"PDF with {len(pages)} page(s) produced no extractable text "
            "(scanned document?)"
        )
        raise PdfTextExtractionError("Could not extract any text from the PDF.")
    return text


def pdf_bytes_from_data_uri(data_uri: str) -> bytes:
    """Decode a ``data:application/pdf;base64,...`` URI."""
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Expected a base64 data URI")
    return base64.b64decode(payload)
