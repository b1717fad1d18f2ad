from __future__ import annotations
from typing import Dict, List, Tuple
import re
from clausescope.utils.types import FlagFinding, FlagScan
from clausescope.analysis.patterns import (
    RISK_PATTERNS,
    PATTERN_REASONS,
    CATEGORY_REASONS,
    CATEGORY_KEYWORDS,
)

SNIPPET_RADIUS = 50

# severity -> [(category, source pattern, compiled)]
COMPILED_PATTERNS: Dict[str, List[Tuple[str, str, re.Pattern]]] = {
    severity: [
        (category, pattern, re.compile(pattern, re.I))
        for category, patterns in groups.items()
        for pattern in patterns
    ]
    for severity, groups in RISK_PATTERNS.items()
}

# Keywords match at the start of a word, so "close" never hits "disclose".
KEYWORD_PATTERNS: Dict[str, List[re.Pattern]] = {
    category: [re.compile(r"\b" + re.escape(kw)) for kw in keywords]
    for category, keywords in CATEGORY_KEYWORDS.items()
}


def flag_reason(pattern: str, category: str, severity: str) -> str:
    if pattern in PATTERN_REASONS:
        return PATTERN_REASONS[pattern]
    if (severity, category) in CATEGORY_REASONS:
        return CATEGORY_REASONS[(severity, category)]
    return f"{severity} risk detected: {pattern}"


def text_snippet(text: str, start: int) -> str:
    """Window of SNIPPET_RADIUS chars either side of ``start``, '...' where cut."""
    lo = max(0, start - SNIPPET_RADIUS)
    hi = min(len(text), start + SNIPPET_RADIUS)
    snippet = text[lo:hi]
    if lo > 0:
        snippet = "..." + snippet
    if hi < len(text):
        snippet = snippet + "..."
    return snippet


def _scan(text: str, severity: str) -> List[FlagFinding]:
    findings: List[FlagFinding] = []
    for category, pattern, rx in COMPILED_PATTERNS[severity]:
        m = rx.search(text)
        if not m:
            continue
        findings.append(FlagFinding(
            category=category,
            pattern=pattern,
            severity=severity,
            reason=flag_reason(pattern, category, severity),
            snippet=text_snippet(text, m.start()),
        ))
    return findings


def detect(text: str) -> FlagScan:
    """Run every HIGH/MEDIUM/LOW pattern once over ``text``.

    Deterministic and model-free; each matching pattern yields exactly one
    finding, in table order.
    """
    return FlagScan(
        red_flags=_scan(text, "HIGH"),
        yellow_flags=_scan(text, "MEDIUM"),
        green_flags=_scan(text, "LOW"),
    )


def categorize_clause(text: str) -> str:
    low = text.lower()
    best, best_score = "other", 0
    for category, patterns in KEYWORD_PATTERNS.items():
        score = sum(1 for p in patterns if p.search(low))
        if score > best_score:
            best, best_score = category, score
    return best


def pattern_concerns(scan: FlagScan) -> List[str]:
    """Red then yellow findings as "category: pattern" labels."""
    return [f"{f.category}: {f.pattern}" for f in scan.red_flags + scan.yellow_flags]
