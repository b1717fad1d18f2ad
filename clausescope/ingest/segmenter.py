from __future__ import annotations
from typing import List
import re
from clausescope.utils.types import Clause
from clausescope.ingest.text_parser import collapse_whitespace

MIN_CLAUSE_CHARS = 50

# "12. " at the start of the text, of a line, or right after sentence
# punctuation (normalized text may have lost its newlines). Decimals such as
# "1.5%" never match because whitespace must follow the period.
SECTION_RE = re.compile(r"(?:^|\n|(?<=[.!?;:]))[ \t]*\d{1,3}\.[ \t]+")
PARAGRAPH_RE = re.compile(r"\n\s*\n")


def _candidates(parts: List[str], min_chars: int) -> List[Clause]:
    out: List[Clause] = []
    for part in parts:
        text = part.strip()
        normalized = collapse_whitespace(text)
        if len(normalized) < min_chars:
            continue
        out.append(Clause(text=text, normalized_text=normalized))
    return out


def segment_clauses(text: str, min_chars: int = MIN_CLAUSE_CHARS) -> List[Clause]:
    """Split document text into clause candidates, in document order.

    Numbered sections are tried first; with fewer than two usable sections the
    text is split on blank lines instead. Short fragments are dropped and
    repeated text is kept as repeated clauses.
    """
    if not text or not text.strip():
        return []
    clauses = _candidates(SECTION_RE.split(text), min_chars)
    if len(clauses) < 2:
        clauses = _candidates(PARAGRAPH_RE.split(text), min_chars)
    return clauses


def segment(text: str, min_chars: int = MIN_CLAUSE_CHARS) -> List[str]:
    return [c.text for c in segment_clauses(text, min_chars=min_chars)]
