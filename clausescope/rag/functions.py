"""Structured legal intents routed onto retrieval + classification.

Each find-X intent runs a fixed, hand-written query; nothing here is learned.
``process_query`` lets the model pick an intent and falls back to returning
its raw reply as a direct answer when that reply is not a routable call.
"""
from __future__ import annotations
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from clausescope.analysis.classifier import SemanticClassifier, TextGenerator
from clausescope.llm.schemas import RoutedCall
from clausescope.rag.retriever import retrieve, retrieve_required
from clausescope.utils.exception import ValidationError
from clausescope.utils.logger import get_logger
from clausescope.utils.types import SearchHit
from clausescope.vectorstore.faiss_store import ClauseIndex

logger = get_logger(__name__)

ROUTER_PROMPT_PATH = Path(__file__).resolve().parent.parent / "prompts" / "router.txt"
with open(ROUTER_PROMPT_PATH, "r", encoding="utf-8") as f:
    ROUTER_TEMPLATE = f.read()

FIND_K = 3
RISK_K = 5

FIND_QUERIES = {
    "find_cancellation_clause": "How do I cancel this subscription? What are the termination conditions?",
    "find_privacy_clause": "What personal information is collected? How is my privacy protected?",
    "find_data_sharing_clause": "Who do they share my data with? What third parties get my information?",
    "find_payment_clause": "What are the payment terms? How much does this cost? Are there hidden fees?",
    "find_liability_clause": "What is their liability? What warranties do they provide? What happens if something goes wrong?",
}

RISK_QUERIES = {
    "privacy": "privacy risks, data collection, personal information handling",
    "cost": "hidden fees, price increases, payment obligations, billing terms",
    "legal": "legal obligations, binding arbitration, class action waivers, jurisdiction",
    "liability": "liability limitations, warranty disclaimers, indemnification",
    "data_sharing": "third-party data sharing, information disclosure, data selling",
    "termination": "account termination, service cancellation, contract ending",
}

RiskType = Literal["privacy", "cost", "legal", "liability", "data_sharing", "termination"]

_DOC_PARAM = {"documentId": {"type": "string", "description": "The document ID to search within"}}

LEGAL_FUNCTIONS: List[Dict[str, Any]] = [
    {
        "name": "find_cancellation_clause",
        "description": "Find and analyze cancellation, termination, or unsubscribe clauses in terms of service",
        "parameters": {"type": "object", "properties": _DOC_PARAM, "required": ["documentId"]},
    },
    {
        "name": "find_privacy_clause",
        "description": "Find and analyze privacy, data collection, or personal information clauses",
        "parameters": {"type": "object", "properties": _DOC_PARAM, "required": ["documentId"]},
    },
    {
        "name": "find_data_sharing_clause",
        "description": "Find and analyze data sharing, third-party disclosure, or information transfer clauses",
        "parameters": {"type": "object", "properties": _DOC_PARAM, "required": ["documentId"]},
    },
    {
        "name": "find_payment_clause",
        "description": "Find and analyze payment, billing, pricing, or subscription fee clauses",
        "parameters": {"type": "object", "properties": _DOC_PARAM, "required": ["documentId"]},
    },
    {
        "name": "find_liability_clause",
        "description": "Find and analyze liability, warranty, indemnification, or legal responsibility clauses",
        "parameters": {"type": "object", "properties": _DOC_PARAM, "required": ["documentId"]},
    },
    {
        "name": "analyze_specific_risk",
        "description": "Analyze a specific type of risk in the document (e.g., 'privacy', 'cost', 'legal')",
        "parameters": {
            "type": "object",
            "properties": {
                **_DOC_PARAM,
                "riskType": {"type": "string", "enum": list(RISK_QUERIES), "description": "The type of risk to analyze"},
            },
            "required": ["documentId", "riskType"],
        },
    },
    {
        "name": "compare_clauses",
        "description": "Compare similar clauses across multiple documents",
        "parameters": {
            "type": "object",
            "properties": {
                "documentIds": {"type": "array", "items": {"type": "string"}, "description": "Array of document IDs to compare"},
                "clauseType": {"type": "string", "description": "Type of clause to compare (e.g., 'cancellation', 'privacy')"},
            },
            "required": ["documentIds", "clauseType"],
        },
    },
]


class IntentArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FindArgs(IntentArgs):
    document_id: str = Field(alias="documentId", min_length=1)


class RiskArgs(FindArgs):
    risk_type: RiskType = Field(alias="riskType")


class CompareArgs(IntentArgs):
    document_ids: List[str] = Field(alias="documentIds", min_length=1)
    clause_type: str = Field(alias="clauseType", min_length=1)


def _parse_args(model, intent: str, args: Optional[Dict[str, Any]]):
    try:
        return model.model_validate(args or {})
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid arguments for {intent}: {fields}") from e


def overall_risk_level(levels: List[str]) -> str:
    high = levels.count("HIGH")
    medium = levels.count("MEDIUM")
    if high >= 2 or (high >= 1 and medium >= 2):
        return "HIGH"
    if high >= 1 or medium >= 2:
        return "MEDIUM"
    return "LOW"


def describe_functions() -> str:
    return "\n".join(f"- {fn['name']}: {fn['description']}" for fn in LEGAL_FUNCTIONS)


class FunctionRouter:
    def __init__(self, index: ClauseIndex, classifier: SemanticClassifier, llm: TextGenerator,
                 router_temperature: float = 0.2, concurrency: int = 4):
        self.index = index
        self.classifier = classifier
        self.llm = llm
        self.router_temperature = router_temperature
        self.concurrency = max(1, concurrency)

    async def _analyze_hit(self, hit: SearchHit, fallback_id: str) -> Dict[str, Any]:
        classification, translation = await asyncio.gather(
            self.classifier.classify(hit.text),
            self.classifier.translate(hit.text),
        )
        return {
            "id": hit.record_id or fallback_id,
            "originalText": hit.text,
            "plainEnglish": translation.as_dict(),
            "riskLevel": classification.risk_level,
            "category": classification.category,
            "concernKeywords": list(classification.concerns),
        }

    async def find_clause(self, intent: str, document_id: str) -> Dict[str, Any]:
        hits = await retrieve_required(self.index, FIND_QUERIES[intent], FIND_K)
        clause = await self._analyze_hit(hits[0], document_id)
        return {
            "clause": clause,
            "plainEnglish": clause["plainEnglish"],
            "relatedClauses": [{"text": h.text, "metadata": dict(h.metadata)} for h in hits[1:]],
        }

    async def analyze_specific_risk(self, document_id: str, risk_type: str) -> Dict[str, Any]:
        hits = await retrieve_required(self.index, RISK_QUERIES[risk_type], RISK_K)
        sem = asyncio.Semaphore(self.concurrency)

        async def _classify(hit: SearchHit) -> Dict[str, Any]:
            async with sem:
                c = await self.classifier.classify(hit.text)
            return {
                "id": hit.record_id or document_id,
                "originalText": hit.text,
                "riskLevel": c.risk_level,
                "category": c.category,
                "concernKeywords": list(c.concerns),
            }

        clauses = list(await asyncio.gather(*(_classify(h) for h in hits)))
        levels = [c["riskLevel"] for c in clauses]
        level = overall_risk_level(levels)
        summary = (
            f"Found {len(clauses)} {risk_type}-related clauses. "
            f"{levels.count('HIGH')} high-risk, {levels.count('MEDIUM')} medium-risk. Overall risk: {level}"
        )
        return {"riskType": risk_type, "clauses": clauses, "overallRiskLevel": level, "summary": summary}

    async def compare_clauses(self, document_ids: List[str], clause_type: str) -> Dict[str, Any]:
        # One global top-1 query per document; retrieval is not scoped to the document.
        query = f"{clause_type} clause terms conditions"
        documents = []
        for doc_id in document_ids:
            hits = await retrieve(self.index, query, 1)
            if hits:
                clause = await self._analyze_hit(hits[0], doc_id)
                documents.append({"documentId": doc_id, "clause": clause, "plainEnglish": clause["plainEnglish"]})
            else:
                documents.append({"documentId": doc_id})
        found = sum(1 for d in documents if "clause" in d)
        return {
            "clauseType": clause_type,
            "documents": documents,
            "foundCount": found,
            "analysis": f"Compared {clause_type} clauses across {len(document_ids)} documents. Found clauses in {found} documents.",
        }

    async def route(self, intent: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        logger.info("Routing intent %s", intent)
        if intent in FIND_QUERIES:
            parsed = _parse_args(FindArgs, intent, args)
            return await self.find_clause(intent, parsed.document_id)
        if intent == "analyze_specific_risk":
            parsed = _parse_args(RiskArgs, intent, args)
            return await self.analyze_specific_risk(parsed.document_id, parsed.risk_type)
        if intent == "compare_clauses":
            parsed = _parse_args(CompareArgs, intent, args)
            return await self.compare_clauses(parsed.document_ids, parsed.clause_type)
        raise ValidationError(f"Unknown function: {intent}")

    async def process_query(self, query: str, document_id: Optional[str] = None) -> Dict[str, Any]:
        prompt = ROUTER_TEMPLATE.format(
            functions=describe_functions(),
            query=query,
            document_id=document_id or "not provided",
        )
        raw = await self.llm.generate(prompt, temperature=self.router_temperature, json_mode=False)
        try:
            call = RoutedCall.model_validate_json(raw)
        except PydanticValidationError:
            logger.info("Router reply is not a function call; returning it as a direct answer")
            return {"directAnswer": raw}
        args = dict(call.args)
        if document_id and not args.get("documentId"):
            args["documentId"] = document_id
        result = await self.route(call.function, args)
        return {"functionCalled": call.function, "result": result}
