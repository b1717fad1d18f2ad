import asyncio
from dataclasses import replace
import pytest
from conftest import StubLLM
from clausescope.service import ClauseService, build_llm, build_services
from clausescope.utils.exception import ExternalServiceError, ValidationError

DOC = (
    "1. You may cancel your subscription anytime from the account settings page. "
    "2. We may sell your data to partners for marketing and analytics purposes. "
    "3. Fees are non-refundable once the billing period has started for any reason."
)


def make_service(config, embeddings, llm=None):
    return ClauseService(build_services(config, llm=llm or StubLLM(), embeddings=embeddings))


def test_analyze_pattern_mode(config, embeddings):
    service = make_service(config, embeddings)
    out = asyncio.run(service.analyze({"source": DOC, "type": "text", "useAI": False}))
    assert out["success"] is True and out["mode"] == "pattern"
    assert len(out["report"]["redFlags"]) == 2
    assert out["report"]["riskScore"] > 0
    assert out["flags"]["overallRisk"] == "HIGH"


def test_analyze_ai_mode_with_overview(config, embeddings):
    llm = StubLLM()
    service = make_service(config, embeddings, llm)
    out = asyncio.run(service.analyze({"source": DOC, "type": "text", "overview": True}))
    assert out["mode"] == "ai"
    assert out["report"]["totalClauses"] == 3
    assert out["document"]["type"] == "text"
    assert out["overview"]["summary"] == "Looks standard."
    assert llm.count("document") == 1


def test_request_validation_errors(config, embeddings):
    service = make_service(config, embeddings)
    out = asyncio.run(service.analyze({"source": DOC, "type": "docx"}))
    assert out == {"success": False, "error": out["error"], "code": "VALIDATION_ERROR"}
    out = asyncio.run(service.search({"query": "hi"}))
    assert out["code"] == "VALIDATION_ERROR"
    out = asyncio.run(service.query({"query": "cancel please", "mode": "specific"}))
    assert out["code"] == "VALIDATION_ERROR"
    assert "function name required" in out["error"]


def test_short_text_is_reported(config, embeddings):
    service = make_service(config, embeddings)
    out = asyncio.run(service.analyze({"source": "too short", "type": "text"}))
    assert out["success"] is False
    assert out["code"] == "VALIDATION_ERROR"


def test_search_modes_after_indexing(config, embeddings):
    service = make_service(config, embeddings)
    asyncio.run(service.analyze({"source": DOC, "type": "text", "useAI": False, "index": True}))
    simple = asyncio.run(service.search({"query": "sell your data partners", "mode": "simple"}))
    assert simple["success"] and simple["result"]["confidence"] == 0.85
    explain = asyncio.run(service.search({"query": "refund fees", "mode": "explain", "limit": 2}))
    assert len(explain["result"]) == 2
    ask = asyncio.run(service.search({"query": "can I cancel?", "mode": "ask"}))
    assert ask["result"]["directAnswer"] == "Stub answer."
    enhanced = asyncio.run(service.search({"query": "billing period", "mode": "enhanced"}))
    assert len(enhanced["result"]["sources"]) == 3


def test_search_without_index_is_not_found(config, embeddings):
    service = make_service(config, embeddings)
    out = asyncio.run(service.search({"query": "How do I cancel?"}))
    assert out["code"] == "NO_RELEVANT_CONTENT"
    assert asyncio.run(service.search({"query": "cancel", "mode": "explain"}))["result"] == []


def test_query_auto_direct_answer(config, embeddings):
    service = make_service(config, embeddings, StubLLM(router="Just email support to cancel."))
    out = asyncio.run(service.query({"query": "How do I cancel?", "documentId": "doc1"}))
    assert out == {"success": True, "directAnswer": "Just email support to cancel."}


def test_query_specific_injects_document_id(config, embeddings):
    service = make_service(config, embeddings)
    asyncio.run(service.analyze({"source": DOC, "type": "text", "useAI": False, "index": True}))
    out = asyncio.run(service.query({
        "query": "what do they do with my data",
        "mode": "specific",
        "function": "find_data_sharing_clause",
        "documentId": "doc1",
    }))
    assert out["success"] and out["functionCalled"] == "find_data_sharing_clause"
    assert out["result"]["clause"]["originalText"]


def test_index_survives_service_restart(config, embeddings):
    service = make_service(config, embeddings)
    asyncio.run(service.analyze({"source": DOC, "type": "text", "useAI": False, "index": True}))
    asyncio.run(service.aclose())
    restarted = make_service(config, embeddings)
    assert len(restarted.services.index) == 3


def test_unexpected_errors_propagate(config, embeddings):
    class BrokenLLM(StubLLM):
        async def generate(self, prompt, temperature=None, json_mode=False):
            raise RuntimeError("boom")

    service = make_service(config, embeddings, BrokenLLM())
    with pytest.raises(RuntimeError):
        asyncio.run(service.analyze({"source": DOC, "type": "text"}))


def test_external_service_errors_are_reported(config, embeddings):
    class DownLLM(StubLLM):
        async def generate(self, prompt, temperature=None, json_mode=False):
            raise ExternalServiceError("Gemini generation failed: unavailable")

    service = make_service(config, embeddings, DownLLM())
    out = asyncio.run(service.analyze({"source": DOC, "type": "text"}))
    assert out["code"] == "EXTERNAL_SERVICE_ERROR"


def test_build_llm_requires_api_key(config, monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(ValidationError):
        build_llm(replace(config, use_gemini=True))
