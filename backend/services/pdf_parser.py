import io
import logging
from pathlib import PurePath

import pdfplumber
from docx import Document

from services.exceptions import ExtractionError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx")


def extract_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF file."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages).strip()


def extract_text_docx(docx_bytes: bytes) -> str:
    """Extract all text from a DOCX file."""
    doc = Document(io.BytesIO(docx_bytes))
    return "\n".join(p.text for p in doc.paragraphs).strip()


def is_supported(filename: str | None) -> bool:
    return bool(filename) and PurePath(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def extract_upload_text(filename: str, content: bytes) -> str:
    """Extract text from an uploaded resume, dispatching on the file extension.

    Raises ExtractionError when the type is unsupported, the file cannot be
    parsed, or it contains no text.
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ExtractionError(f"Unsupported file type: {suffix or 'none'}")

    try:
        text = extract_text(content) if suffix == ".pdf" else extract_text_docx(content)
    except Exception as e:
        logger.error("Failed to parse %s: %s", filename, e)
        raise ExtractionError(f"Could not parse {suffix[1:].upper()} file") from e

    if not text.strip():
        raise ExtractionError("No text could be extracted from file")
    return text
