from __future__ import annotations
from functools import lru_cache
from typing import List, Optional
import os
import math
import hashlib
import google.generativeai as genai
from langchain_core.embeddings import Embeddings
from clausescope.utils.config import AppConfig
from clausescope.utils.exception import ExternalServiceError, ValidationError
from clausescope.utils.logger import get_logger

logger = get_logger(__name__)

GEMINI_EMBED_MODEL = "models/text-embedding-004"


class HashingEmbedding(Embeddings):
    """Bag-of-hashed-tokens embedding.

    Deterministic and dependency-free, so identical text always maps to the
    same unit vector. Not semantic; used offline and in tests.
    """

    def __init__(self, dim: int = 384):
        self.dim = dim

    def _vectorize(self, text: str) -> List[float]:
        vec = [0.0] * self.dim
        tokens = [t for t in text.lower().split() if t]
        if not tokens:
            return vec
        for tok in tokens:
            h = int(hashlib.sha1(tok.encode()).hexdigest(), 16)
            vec[h % self.dim] += 1.0
        norm = math.sqrt(sum(v * v for v in vec)) or 1.0
        return [v / norm for v in vec]

    def embed_documents(self, texts):  # type: ignore[override]
        return [self._vectorize(t) for t in texts]

    def embed_query(self, text):  # type: ignore[override]
        return self._vectorize(text)


class GeminiEmbeddings(Embeddings):
    """Google text-embedding-004 through google-generativeai."""

    def __init__(self, model: str = GEMINI_EMBED_MODEL, api_key: Optional[str] = None):
        api_key = api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ValidationError("GOOGLE_API_KEY not set")
        genai.configure(api_key=api_key)
        self.model = model

    def _embed(self, text: str, task_type: str) -> List[float]:
        try:
            rsp = genai.embed_content(model=self.model, content=text, task_type=task_type)
        except ValueError as e:
            raise ExternalServiceError(f"Gemini embedding failed: {e}") from e
        return list(rsp["embedding"])

    def embed_documents(self, texts):  # type: ignore[override]
        return [self._embed(t, "retrieval_document") for t in texts]

    def embed_query(self, text):  # type: ignore[override]
        return self._embed(text, "retrieval_query")


@lru_cache(maxsize=4)
def _load_hf_embedding(model_name: str):  # pragma: no cover (heavy)
    try:
        from langchain_huggingface import HuggingFaceEmbeddings
    except ImportError as e:
        raise ExternalServiceError(
            "HuggingFace embeddings need langchain-huggingface (pip install 'clausescope[local]')"
        ) from e
    logger.info("Loading HuggingFace embedding model %s", model_name)
    return HuggingFaceEmbeddings(model_name=model_name)


def get_embedding_model(config: AppConfig) -> Embeddings:
    provider = config.embed_provider
    if provider == "huggingface":
        return _load_hf_embedding(config.embed_model)
    if provider == "gemini":
        return GeminiEmbeddings()
    if provider == "hashing":
        return HashingEmbedding()
    raise ValidationError(f"Unknown embedding provider: {provider}")
