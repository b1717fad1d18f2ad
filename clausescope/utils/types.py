from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Literal

RiskLevel = Literal["HIGH", "MEDIUM", "LOW"]
ClauseCategory = Literal[
    "data-privacy", "payment", "cancellation", "arbitration", "liability",
    "intellectual-property", "termination", "modification", "other",
]
SourceType = Literal["text", "url", "pdf"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ParsedDocument:
    text: str
    source: str
    type: str
    title: str
    word_count: int
    page_count: Optional[int] = None
    parsed_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "metadata": {
                "source": self.source,
                "type": self.type,
                "title": self.title,
                "pageCount": self.page_count,
                "wordCount": self.word_count,
                "parsedAt": self.parsed_at.isoformat(),
            },
        }


@dataclass
class Clause:
    text: str
    normalized_text: str


@dataclass(frozen=True)
class FlagFinding:
    category: str
    pattern: str
    severity: RiskLevel
    reason: str
    snippet: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "pattern": self.pattern,
            "severity": self.severity,
            "reason": self.reason,
            "text": self.snippet,
        }


@dataclass
class FlagScan:
    red_flags: List[FlagFinding] = field(default_factory=list)
    yellow_flags: List[FlagFinding] = field(default_factory=list)
    green_flags: List[FlagFinding] = field(default_factory=list)

    @property
    def overall_risk(self) -> str:
        if self.red_flags:
            return "HIGH"
        if self.yellow_flags:
            return "MEDIUM"
        return "LOW"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "redFlags": [f.as_dict() for f in self.red_flags],
            "yellowFlags": [f.as_dict() for f in self.yellow_flags],
            "greenFlags": [f.as_dict() for f in self.green_flags],
            "overallRisk": self.overall_risk,
        }


@dataclass
class AnalyzedClause:
    id: str
    original_text: str
    plain_english: str
    risk_level: RiskLevel
    category: ClauseCategory
    concern_keywords: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "originalText": self.original_text,
            "plainEnglish": self.plain_english,
            "riskLevel": self.risk_level,
            "category": self.category,
            "concernKeywords": list(self.concern_keywords),
        }


@dataclass
class IndexedClauseRecord:
    text: str
    embedding: List[float]
    metadata: Dict[str, Any]


@dataclass
class SearchHit:
    record_id: str
    text: str
    metadata: Dict[str, Any]
    score: float

    @property
    def category(self) -> str:
        return self.metadata.get("category", "other")

    @property
    def risk_level(self) -> str:
        return self.metadata.get("riskLevel", "LOW")

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.record_id, "text": self.text, "metadata": dict(self.metadata), "score": self.score}


@dataclass
class DocumentRiskReport:
    document_id: str
    source: str
    analyzed_at: datetime
    red_flags: List[AnalyzedClause]
    yellow_flags: List[AnalyzedClause]
    green_flags: List[AnalyzedClause]
    total_clauses: int
    risk_score: int
    summary: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "source": self.source,
            "analyzedAt": self.analyzed_at.isoformat(),
            "redFlags": [c.as_dict() for c in self.red_flags],
            "yellowFlags": [c.as_dict() for c in self.yellow_flags],
            "greenFlags": [c.as_dict() for c in self.green_flags],
            "totalClauses": self.total_clauses,
            "riskScore": self.risk_score,
            "summary": self.summary,
        }
