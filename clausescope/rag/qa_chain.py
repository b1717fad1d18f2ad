from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence
from clausescope.analysis.classifier import SemanticClassifier
from clausescope.llm.schemas import PlainEnglish
from clausescope.rag.retriever import retrieve, retrieve_required
from clausescope.utils.logger import get_logger
from clausescope.utils.types import SearchHit
from clausescope.vectorstore.faiss_store import ClauseIndex

logger = get_logger(__name__)

SIMPLE_K = 5
ENHANCED_K = 3
EXPLAIN_K = 5
SOURCE_PREVIEW_CHARS = 200

# Coarse heuristics, not calibrated probabilities.
CONFIDENCE_WITH_HITS = 0.85
CONFIDENCE_WITHOUT_HITS = 0.5
RELEVANCE_DECAY = 0.15


def confidence_for(hits: Sequence[SearchHit]) -> float:
    return CONFIDENCE_WITH_HITS if hits else CONFIDENCE_WITHOUT_HITS


def relevance_for(rank: int) -> float:
    return 1 - rank * RELEVANCE_DECAY


def build_context(hits: Sequence[SearchHit]) -> str:
    return "\n\n".join(f"[Clause {i + 1}]: {h.text}" for i, h in enumerate(hits))


def related_clause(hit: SearchHit) -> Dict[str, Any]:
    return {
        "text": hit.text,
        "category": hit.category,
        "riskLevel": hit.risk_level,
        "metadata": dict(hit.metadata),
        "score": hit.score,
    }


@dataclass
class RAGResult:
    answer: str
    source_clause: str
    plain_english: str
    confidence: float
    related_clauses: List[Dict[str, Any]] = field(default_factory=list)
    translation: PlainEnglish | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "sourceClause": self.source_clause,
            "plainEnglish": self.plain_english,
            "confidence": self.confidence,
            "relatedClauses": self.related_clauses,
        }


@dataclass
class EnhancedResult:
    answer: str
    context: str
    plain_english: str
    sources: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "context": self.context,
            "plainEnglish": self.plain_english,
            "sources": self.sources,
        }


@dataclass
class AskResult:
    direct_answer: str
    explanation: str
    risks: List[str] = field(default_factory=list)
    related_topics: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "directAnswer": self.direct_answer,
            "explanation": self.explanation,
            "risks": self.risks,
            "relatedTopics": self.related_topics,
        }


class RAGEngine:
    """Retrieval over the clause index plus grounded answer generation."""

    def __init__(self, index: ClauseIndex, classifier: SemanticClassifier, concurrency: int = 4):
        self.index = index
        self.classifier = classifier
        self.concurrency = max(1, concurrency)

    async def simple_search(self, query: str, k: int = SIMPLE_K) -> RAGResult:
        """Answer from the single most similar clause.

        The answer and the plain-English translation of that clause are two
        independent model calls and run concurrently.
        """
        hits = await retrieve_required(self.index, query, k)
        top = hits[0]
        answer, translation = await asyncio.gather(
            self.classifier.answer_question(query, top.text),
            self.classifier.translate(top.text),
        )
        logger.debug("simple_search %r: %d hit(s), top score %.3f", query, len(hits), top.score)
        return RAGResult(
            answer=answer.answer,
            source_clause=top.text,
            plain_english=translation.simple,
            confidence=confidence_for(hits),
            related_clauses=[related_clause(h) for h in hits[1:]],
            translation=translation,
        )

    async def enhanced_search(self, query: str, k: int = ENHANCED_K) -> EnhancedResult:
        hits = await retrieve_required(self.index, query, k)
        context = build_context(hits)
        answer, translation = await asyncio.gather(
            self.classifier.answer_question(query, context),
            self.classifier.translate(hits[0].text),
        )
        sources = [
            {
                "text": h.text[:SOURCE_PREVIEW_CHARS] + "...",
                "category": h.category,
                "relevance": relevance_for(i),
            }
            for i, h in enumerate(hits)
        ]
        return EnhancedResult(answer=answer.answer, context=context, plain_english=translation.simple, sources=sources)

    async def explain(self, topic: str, k: int = EXPLAIN_K) -> List[Dict[str, Any]]:
        hits = await retrieve(self.index, topic, k)
        if not hits:
            return []
        translations = await self.batch_translate([h.text for h in hits])
        return [
            {
                "clause": h.text,
                "plainEnglish": t["plainEnglish"],
                "category": h.category,
                "riskLevel": h.risk_level,
            }
            for h, t in zip(hits, translations)
        ]

    async def ask(self, question: str, k: int = SIMPLE_K) -> AskResult:
        rag = await self.simple_search(question, k)
        translation = rag.translation
        return AskResult(
            direct_answer=rag.answer,
            explanation=translation.what_it_means,
            risks=list(translation.risks),
            related_topics=[c["category"] for c in rag.related_clauses],
        )

    async def batch_translate(self, clauses: Sequence[str]) -> List[Dict[str, str]]:
        sem = asyncio.Semaphore(self.concurrency)

        async def _one(clause: str) -> Dict[str, str]:
            async with sem:
                translation = await self.classifier.translate(clause)
            return {"original": clause, "plainEnglish": translation.simple}

        return list(await asyncio.gather(*(_one(c) for c in clauses)))
