from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Protocol
from clausescope.utils.logger import get_logger
from clausescope.utils.types import FlagFinding
from clausescope.llm.schemas import (
    ClauseAnswer,
    ClauseClassification,
    DocumentAnalysis,
    PlainEnglish,
    RiskDetection,
    parse_reply,
)

logger = get_logger(__name__)

PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


def load_prompt(name: str) -> str:
    with open(PROMPT_DIR / f"{name}.txt", "r", encoding="utf-8") as f:
        return f.read()


CLASSIFY_TEMPLATE = load_prompt("classify")
RISKS_TEMPLATE = load_prompt("risks")
TRANSLATE_TEMPLATE = load_prompt("translate")
ANSWER_TEMPLATE = load_prompt("answer")
DOCUMENT_TEMPLATE = load_prompt("document")

DOC_CHAR_BUDGET = 3000


class TextGenerator(Protocol):
    async def generate(self, prompt: str, temperature: Optional[float] = None, json_mode: bool = False) -> str: ...


def truncate_document(text: str, max_chars: int = DOC_CHAR_BUDGET) -> str:
    return text if len(text) <= max_chars else text[:max_chars] + "..."


class SemanticClassifier:
    """Prompt construction and strict reply parsing for clause-level model calls."""

    def __init__(self, llm: TextGenerator, temperature: Optional[float] = None, doc_char_budget: int = DOC_CHAR_BUDGET):
        self.llm = llm
        self.temperature = temperature
        self.doc_char_budget = doc_char_budget

    async def _call(self, prompt: str) -> str:
        return await self.llm.generate(prompt, temperature=self.temperature, json_mode=True)

    async def classify(self, clause: str) -> ClauseClassification:
        raw = await self._call(CLASSIFY_TEMPLATE.format(clause=clause))
        return parse_reply(ClauseClassification, raw, "classify")

    async def detect_risks(self, clause: str) -> RiskDetection:
        raw = await self._call(RISKS_TEMPLATE.format(clause=clause))
        return parse_reply(RiskDetection, raw, "detect_risks")

    async def translate(self, clause: str) -> PlainEnglish:
        raw = await self._call(TRANSLATE_TEMPLATE.format(clause=clause))
        return parse_reply(PlainEnglish, raw, "translate")

    async def answer_question(self, question: str, clause: str) -> ClauseAnswer:
        raw = await self._call(ANSWER_TEMPLATE.format(question=question, clause=clause))
        return parse_reply(ClauseAnswer, raw, "answer_question")

    async def analyze_document(self, document: str) -> DocumentAnalysis:
        text = truncate_document(document, self.doc_char_budget)
        if len(text) < len(document):
            logger.debug("Document truncated from %d to %d chars for overview", len(document), self.doc_char_budget)
        raw = await self._call(DOCUMENT_TEMPLATE.format(document=text))
        return parse_reply(DocumentAnalysis, raw, "analyze_document")


def semantic_findings(clause: str, detection: RiskDetection) -> List[FlagFinding]:
    """One FlagFinding per model-detected risk."""
    snippet = clause if len(clause) <= 100 else clause[:100] + "..."
    return [
        FlagFinding(
            category=risk.type,
            pattern="semantic",
            severity=risk.severity,
            reason=risk.description,
            snippet=snippet,
        )
        for risk in detection.detected_risks
    ]
