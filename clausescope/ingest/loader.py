from __future__ import annotations
import asyncio
import base64
import binascii
from typing import Union
from clausescope.utils.exception import ValidationError
from clausescope.utils.types import ParsedDocument
from clausescope.ingest.pdf_loader import extract_pdf
from clausescope.ingest.text_parser import MAX_TEXT_CHARS, parse_text, sanitize_input, validate_text
from clausescope.ingest.url_loader import fetch_url, is_valid_url


def decode_pdf_source(source: Union[str, bytes]) -> bytes:
    if isinstance(source, bytes):
        return source
    try:
        return base64.b64decode(source, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("PDF source must be base64 encoded") from e


async def parse_document(
    source: Union[str, bytes],
    source_type: str,
    fetch_timeout: float = 10.0,
    max_text_chars: int = MAX_TEXT_CHARS,
) -> ParsedDocument:
    """Route a raw source to the right extractor.

    URL fetch and PDF extraction are blocking and run in a worker thread.
    """
    if source_type == "text":
        if not isinstance(source, str):
            raise ValidationError("Text source must be a string")
        text = sanitize_input(source)
        validate_text(text, max_chars=max_text_chars)
        return parse_text(text)
    if source_type == "url":
        if not isinstance(source, str) or not is_valid_url(source):
            raise ValidationError("Invalid URL format")
        return await asyncio.to_thread(fetch_url, source, fetch_timeout)
    if source_type == "pdf":
        data = decode_pdf_source(source)
        return await asyncio.to_thread(extract_pdf, data)
    raise ValidationError(f"Unsupported input type: {source_type}")
