"""Composition root and request facade.

``build_services`` is the only place clients are constructed; every component
receives its collaborators explicitly. ``ClauseService`` accepts the analyze /
search / query request shapes and returns plain dicts.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Literal, Optional
from langchain_core.embeddings import Embeddings
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from clausescope.utils.config import AppConfig
from clausescope.utils.exception import ClauseScopeError, ValidationError
from clausescope.utils.logger import get_logger
from clausescope.utils.types import SourceType
from clausescope.analysis.classifier import SemanticClassifier, TextGenerator
from clausescope.analysis.clauses import ClauseAnalyzer
from clausescope.embeddings.embeddings import get_embedding_model
from clausescope.ingest.loader import parse_document
from clausescope.rag.functions import FunctionRouter
from clausescope.rag.qa_chain import RAGEngine
from clausescope.vectorstore.faiss_store import ClauseIndex

logger = get_logger(__name__)


def build_llm(config: AppConfig) -> TextGenerator:
    if config.use_gemini:
        from clausescope.llm.gemini import GeminiClient
        return GeminiClient(config)
    from clausescope.llm.fallback import LocalLLM
    return LocalLLM(config)


@dataclass
class Services:
    config: AppConfig
    llm: TextGenerator
    embeddings: Embeddings
    index: ClauseIndex
    classifier: SemanticClassifier
    analyzer: ClauseAnalyzer
    rag: RAGEngine
    router: FunctionRouter


def build_services(
    config: AppConfig,
    llm: Optional[TextGenerator] = None,
    embeddings: Optional[Embeddings] = None,
) -> Services:
    llm = llm or build_llm(config)
    embeddings = embeddings or get_embedding_model(config)
    index = ClauseIndex(config, embeddings)
    classifier = SemanticClassifier(llm, temperature=config.temperature, doc_char_budget=config.doc_char_budget)
    return Services(
        config=config,
        llm=llm,
        embeddings=embeddings,
        index=index,
        classifier=classifier,
        analyzer=ClauseAnalyzer(classifier, config, index=index),
        rag=RAGEngine(index, classifier, concurrency=config.classify_concurrency),
        router=FunctionRouter(
            index, classifier, llm,
            router_temperature=config.router_temperature,
            concurrency=config.classify_concurrency,
        ),
    )


class Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AnalyzeRequest(Request):
    source: str = Field(min_length=1)
    type: SourceType
    use_ai: bool = Field(default=True, alias="useAI")
    index: bool = False
    overview: bool = False


class SearchRequest(Request):
    query: str = Field(min_length=3)
    mode: Literal["simple", "enhanced", "explain", "ask"] = "simple"
    limit: int = Field(default=5, ge=1, le=20)


class QueryRequest(Request):
    query: str = Field(min_length=3)
    document_id: Optional[str] = Field(default=None, alias="documentId")
    mode: Literal["auto", "specific"] = "auto"
    function: Optional[str] = None
    args: Optional[Dict[str, Any]] = None


def _validate(model, payload: Dict[str, Any]):
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid request: {problems}") from e


class ClauseService:
    def __init__(self, services: Services):
        self.services = services

    async def _handle(self, name: str, fn: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
        try:
            return await fn()
        except ClauseScopeError as e:
            logger.warning("%s failed [%s]: %s", name, e.code, e.message)
            return e.as_dict()
        except Exception:
            logger.exception("%s failed unexpectedly", name)
            raise

    async def analyze(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async def _run() -> Dict[str, Any]:
            req = _validate(AnalyzeRequest, payload)
            cfg = self.services.config
            doc = await parse_document(req.source, req.type, cfg.fetch_timeout, cfg.max_text_chars)
            analyzer = self.services.analyzer
            if not req.use_ai:
                flags, report = analyzer.analyze_patterns_only(doc)
                if req.index:
                    await analyzer.index_report(report)
                return {"success": True, "mode": "pattern", "flags": flags.as_dict(), "report": report.as_dict()}
            report = await analyzer.analyze_document(doc, index=req.index)
            out: Dict[str, Any] = {
                "success": True,
                "mode": "ai",
                "document": doc.as_dict()["metadata"],
                "report": report.as_dict(),
            }
            if req.overview:
                overview = await self.services.classifier.analyze_document(doc.text)
                out["overview"] = overview.model_dump(by_alias=True)
            return out

        return await self._handle("analyze", _run)

    async def search(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async def _run() -> Dict[str, Any]:
            req = _validate(SearchRequest, payload)
            rag = self.services.rag
            if req.mode == "simple":
                result = (await rag.simple_search(req.query, k=req.limit)).as_dict()
            elif req.mode == "enhanced":
                result = (await rag.enhanced_search(req.query)).as_dict()
            elif req.mode == "explain":
                result = await rag.explain(req.query, k=req.limit)
            else:
                result = (await rag.ask(req.query, k=req.limit)).as_dict()
            return {"success": True, "mode": req.mode, "result": result}

        return await self._handle("search", _run)

    async def query(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async def _run() -> Dict[str, Any]:
            req = _validate(QueryRequest, payload)
            router = self.services.router
            if req.mode == "auto":
                return {"success": True, **(await router.process_query(req.query, req.document_id))}
            if not req.function:
                raise ValidationError("function name required for specific mode")
            args = dict(req.args or {})
            if req.document_id and not args.get("documentId"):
                args["documentId"] = req.document_id
            result = await router.route(req.function, args)
            return {"success": True, "functionCalled": req.function, "result": result}

        return await self._handle("query", _run)

    async def aclose(self) -> None:
        await self.services.index.close()
