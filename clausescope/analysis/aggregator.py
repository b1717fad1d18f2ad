from __future__ import annotations
import math
import uuid
from typing import Iterable, List, Optional
from clausescope.utils.types import AnalyzedClause, DocumentRiskReport, FlagScan, utcnow
from clausescope.analysis.redflags import pattern_concerns

HIGH_SCORE = 70
LOW_SCORE = 30


def aggregate(pattern_scan: FlagScan, semantic_level: str, semantic_score: int) -> str:
    """Final risk level for one clause.

    The semantic score thresholds dominate; between them the semantic label
    stands, but a red pattern finding is never downgraded.
    """
    if semantic_score >= HIGH_SCORE:
        return "HIGH"
    if semantic_score <= LOW_SCORE:
        return "LOW"
    if pattern_scan.red_flags:
        return "HIGH"
    if semantic_level in ("HIGH", "MEDIUM"):
        return semantic_level
    return "LOW"


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def score(red: int, yellow: int, green: int) -> int:
    total = red + yellow + green
    if total == 0:
        return 0
    raw = (red * 100 + yellow * 50) / (total * 100) * 100
    return min(_round_half_up(raw), 100)


def merge_concerns(semantic: Iterable[str], pattern_scan: FlagScan) -> List[str]:
    merged: List[str] = []
    for item in list(semantic) + pattern_concerns(pattern_scan):
        if item and item not in merged:
            merged.append(item)
    return merged


def build_summary(red: int, yellow: int, green: int) -> str:
    parts = []
    if red:
        parts.append(f"CRITICAL: Found {red} high-risk clause(s) that take away your rights.")
    if yellow:
        parts.append(f"WARNING: Found {yellow} medium-risk clause(s) requiring attention.")
    if green:
        parts.append(f"Good: Found {green} fair/standard clause(s).")
    parts.append(f"Overall Risk Score: {score(red, yellow, green)}/100")
    return " ".join(parts)


def new_document_id() -> str:
    return f"doc_{uuid.uuid4().hex}"


def build_report(clauses: List[AnalyzedClause], source: str, document_id: Optional[str] = None) -> DocumentRiskReport:
    red = [c for c in clauses if c.risk_level == "HIGH"]
    yellow = [c for c in clauses if c.risk_level == "MEDIUM"]
    green = [c for c in clauses if c.risk_level == "LOW"]
    return DocumentRiskReport(
        document_id=document_id or new_document_id(),
        source=source,
        analyzed_at=utcnow(),
        red_flags=red,
        yellow_flags=yellow,
        green_flags=green,
        total_clauses=len(clauses),
        risk_score=score(len(red), len(yellow), len(green)),
        summary=build_summary(len(red), len(yellow), len(green)),
    )
