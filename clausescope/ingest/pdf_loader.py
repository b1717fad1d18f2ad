from __future__ import annotations
from typing import List, Optional
import io
from pypdf import PdfReader
from pypdf.errors import PdfReadError
from clausescope.utils.exception import ParseError, TooShort
from clausescope.utils.logger import get_logger
from clausescope.utils.types import ParsedDocument
from clausescope.ingest.text_parser import normalize_text, word_count

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"


def is_pdf(data: bytes) -> bool:
    return data[:5] == PDF_MAGIC


def extract_pdf(data: bytes, filename: Optional[str] = None) -> ParsedDocument:
    """Extract page text from PDF bytes and normalize it.

    Raises ParseError when the bytes are not a readable PDF or when fewer than
    50 characters of text survive extraction (scanned / image-only files).
    """
    if not is_pdf(data):
        raise ParseError("PDF parsing failed: missing %PDF- header")
    try:
        reader = PdfReader(io.BytesIO(data))
        pages_text: List[str] = [(page.extract_text() or "") for page in reader.pages]
    except (PdfReadError, ValueError, KeyError) as e:
        raise ParseError(f"PDF parsing failed: {e}") from e
    combined = "\n\n".join(t for t in pages_text if t.strip())
    try:
        text = normalize_text(combined)
    except TooShort as e:
        raise ParseError("Insufficient text content in PDF") from e
    logger.info("Extracted %d chars from %d PDF pages", len(text), len(pages_text))
    return ParsedDocument(
        text=text,
        source=filename or "uploaded-pdf",
        type="pdf",
        title=filename or "PDF Document",
        word_count=word_count(text),
        page_count=len(pages_text),
    )
