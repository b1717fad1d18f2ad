from __future__ import annotations
import asyncio
import uuid
from typing import List, Optional, Tuple, Union
from clausescope.utils.config import AppConfig
from clausescope.utils.logger import get_logger
from clausescope.utils.types import AnalyzedClause, Clause, DocumentRiskReport, FlagScan, ParsedDocument
from clausescope.ingest.segmenter import segment_clauses
from clausescope.analysis.classifier import SemanticClassifier, semantic_findings
from clausescope.analysis.redflags import detect, categorize_clause
from clausescope.analysis.aggregator import aggregate, merge_concerns, build_report, new_document_id

logger = get_logger(__name__)

NO_PATTERN_MATCH = "No known risk patterns found in this clause."


def new_clause_id() -> str:
    return f"clause_{uuid.uuid4().hex}"


class ClauseAnalyzer:
    """Segment -> {pattern scan, semantic classification} -> aggregate -> report.

    Clause analyses are independent, so they fan out concurrently, bounded by
    ``classify_concurrency``. Only the first ``max_clauses`` clauses of a
    document are sent to the model.
    """

    def __init__(self, classifier: SemanticClassifier, config: AppConfig, index=None):
        self.classifier = classifier
        self.config = config
        self.index = index

    async def analyze_clause(self, clause: Clause) -> AnalyzedClause:
        scan = detect(clause.normalized_text)
        classification, detection = await asyncio.gather(
            self.classifier.classify(clause.normalized_text),
            self.classifier.detect_risks(clause.normalized_text),
        )
        findings = semantic_findings(clause.normalized_text, detection)
        level = aggregate(scan, classification.risk_level, detection.overall_risk_score)
        semantic = detection.red_flags or classification.concerns or [f.category for f in findings]
        return AnalyzedClause(
            id=new_clause_id(),
            original_text=clause.text,
            plain_english=classification.plain_english,
            risk_level=level,
            category=classification.category,
            concern_keywords=merge_concerns(semantic, scan),
        )

    async def analyze_clauses(self, clauses: List[Clause]) -> List[AnalyzedClause]:
        sem = asyncio.Semaphore(max(1, self.config.classify_concurrency))

        async def _one(clause: Clause) -> AnalyzedClause:
            async with sem:
                return await self.analyze_clause(clause)

        return list(await asyncio.gather(*(_one(c) for c in clauses)))

    def _segment(self, text: str) -> List[Clause]:
        return segment_clauses(text, min_chars=self.config.min_clause_chars)

    async def analyze_document(
        self,
        document: Union[ParsedDocument, str],
        source: Optional[str] = None,
        use_ai: bool = True,
        index: bool = False,
    ) -> DocumentRiskReport:
        text, source = _unpack(document, source)
        if not use_ai:
            _, report = self.analyze_patterns_only(text, source)
        else:
            clauses = self._segment(text)
            if len(clauses) > self.config.max_clauses:
                logger.warning(
                    "Document has %d clauses; analyzing the first %d only",
                    len(clauses), self.config.max_clauses,
                )
                clauses = clauses[: self.config.max_clauses]
            logger.info("Analyzing %d clause(s) from %s", len(clauses), source)
            analyzed = await self.analyze_clauses(clauses)
            report = build_report(analyzed, source)
        if index:
            await self.index_report(report)
        return report

    def analyze_patterns_only(
        self, document: Union[ParsedDocument, str], source: Optional[str] = None
    ) -> Tuple[FlagScan, DocumentRiskReport]:
        """Model-free analysis: a whole-text flag scan plus a per-clause report."""
        text, source = _unpack(document, source)
        analyzed = []
        for clause in self._segment(text):
            scan = detect(clause.normalized_text)
            reasons = [f.reason for f in scan.red_flags + scan.yellow_flags + scan.green_flags]
            analyzed.append(AnalyzedClause(
                id=new_clause_id(),
                original_text=clause.text,
                plain_english=reasons[0] if reasons else NO_PATTERN_MATCH,
                risk_level=scan.overall_risk,
                category=categorize_clause(clause.normalized_text),
                concern_keywords=merge_concerns([], scan),
            ))
        logger.info("Pattern-only analysis of %d clause(s) from %s", len(analyzed), source)
        return detect(text), build_report(analyzed, source, new_document_id())

    async def index_report(self, report: DocumentRiskReport) -> List[str]:
        if self.index is None:
            logger.warning("Indexing requested but no clause index is configured")
            return []
        items = [
            (c.original_text, {
                "category": c.category,
                "riskLevel": c.risk_level,
                "sourceUrl": report.source,
                "documentId": report.document_id,
            })
            for c in report.red_flags + report.yellow_flags + report.green_flags
        ]
        return await self.index.index_clauses(items)


def _unpack(document: Union[ParsedDocument, str], source: Optional[str]) -> Tuple[str, str]:
    if isinstance(document, ParsedDocument):
        return document.text, source or document.source
    return document, source or "direct-input"
