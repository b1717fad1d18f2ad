"""Lightweight health check for ClauseScope.

No model downloads: the vector store is exercised with the hashing
embedding in a throwaway workspace.
"""
from __future__ import annotations

import asyncio
import os
import tempfile
from dataclasses import dataclass, replace
from typing import Dict, Any, List, Optional

from clausescope.utils.config import AppConfig


@dataclass
class HealthStatus:
    component: str
    ok: bool
    detail: str

    def as_dict(self) -> Dict[str, Any]:
        return {"component": self.component, "ok": self.ok, "detail": self.detail}


def _check_import(module: str) -> HealthStatus:
    try:
        __import__(module)
        return HealthStatus(module, True, "import ok")
    except Exception as e:  # pragma: no cover - diagnostic path
        return HealthStatus(module, False, f"import failed: {e}")


CORE_IMPORTS = [
    "langchain_core.embeddings",
    "langchain_community.vectorstores.faiss",
    "faiss",
    "google.generativeai",
    "pypdf",
    "pydantic",
    "requests",
    "bs4",
]


def _check_api_key(config: AppConfig) -> HealthStatus:
    needs_key = config.use_gemini or config.embed_provider == "gemini"
    if not needs_key:
        return HealthStatus("api-key", True, "not required")
    if os.getenv("GOOGLE_API_KEY"):
        return HealthStatus("api-key", True, "GOOGLE_API_KEY set")
    return HealthStatus("api-key", False, "GOOGLE_API_KEY not set")


async def _index_round_trip(config: AppConfig) -> str:
    from clausescope.embeddings.embeddings import HashingEmbedding
    from clausescope.vectorstore.faiss_store import ClauseIndex

    index = ClauseIndex(config, HashingEmbedding(dim=32))
    text = "Sample contract clause about termination and liability."
    await index.index_clauses([(text, {"category": "termination", "riskLevel": "LOW"})])
    hits = await index.search_text(text, k=1)
    if not hits or hits[0].text != text:
        raise RuntimeError("indexed clause not returned as top hit")
    return f"faiss mini index ok (score {hits[0].score:.2f})"


def run_health_check(config: Optional[AppConfig] = None, light: bool = True) -> Dict[str, Any]:
    """Run a series of lightweight checks.

    light=True skips the import checks for the optional local model stack.
    """
    config = config or AppConfig()
    results: List[HealthStatus] = []
    modules = CORE_IMPORTS if light else CORE_IMPORTS + ["transformers", "torch", "langchain_huggingface"]
    for mod in modules:
        results.append(_check_import(mod))
    results.append(_check_api_key(config))

    with tempfile.TemporaryDirectory() as tmp:
        try:
            detail = asyncio.run(_index_round_trip(replace(config, workspace_dir=tmp)))
            results.append(HealthStatus("faiss-mini", True, detail))
        except Exception as e:  # pragma: no cover - rare path
            results.append(HealthStatus("faiss-mini", False, f"faiss test failed: {e}"))

    aggregate = all(r.ok for r in results)
    return {
        "ok": aggregate,
        "components": [r.as_dict() for r in results],
    }
