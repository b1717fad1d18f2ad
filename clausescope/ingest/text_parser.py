from __future__ import annotations
import re
from clausescope.utils.exception import TooShort, ValidationError
from clausescope.utils.types import ParsedDocument

MIN_TEXT_CHARS = 50
MAX_TEXT_CHARS = 100_000

HSPACE_RE = re.compile(r"[^\S\n]+")
BLANK_LINES_RE = re.compile(r"\n{3,}")
WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(raw: str, min_chars: int = MIN_TEXT_CHARS) -> str:
    """Collapse runs of spaces/tabs and squeeze blank lines, keeping paragraph breaks.

    Paragraph breaks survive as a single blank line so the segmenter can still
    fall back to paragraph splitting.
    """
    text = raw.replace("\x00", " ").replace("\r\n", "\n").replace("\r", "\n")
    text = HSPACE_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = BLANK_LINES_RE.sub("\n\n", text).strip()
    if len(text) < min_chars:
        raise TooShort(f"Text must be at least {min_chars} characters long")
    return text


def word_count(text: str) -> int:
    return len(text.split())


def validate_text(text: str, min_chars: int = MIN_TEXT_CHARS, max_chars: int = MAX_TEXT_CHARS) -> None:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text input is required")
    length = len(text.strip())
    if length < min_chars:
        raise ValidationError(f"Text must be at least {min_chars} characters")
    if length > max_chars:
        raise ValidationError(f"Text exceeds maximum length of {max_chars:,} characters")


def sanitize_input(text: str) -> str:
    text = text.replace("<", "").replace(">", "")
    return re.sub(r"javascript:", "", text, flags=re.I).strip()


def parse_text(raw: str, min_chars: int = MIN_TEXT_CHARS) -> ParsedDocument:
    text = normalize_text(raw, min_chars=min_chars)
    return ParsedDocument(
        text=text,
        source="direct-input",
        type="text",
        title="Direct Text Input",
        word_count=word_count(text),
    )
