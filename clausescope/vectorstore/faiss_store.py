from __future__ import annotations
import asyncio
import os
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple
import faiss
import numpy as np
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.embeddings import Embeddings
from clausescope.utils.config import AppConfig
from clausescope.utils.logger import get_logger
from clausescope.utils.types import IndexedClauseRecord, SearchHit, utcnow

logger = get_logger(__name__)

# Vectors are stored as unit vectors, so inner product is cosine similarity.
STORE_KWARGS = {"distance_strategy": DistanceStrategy.MAX_INNER_PRODUCT}


def unit_vector(vec: Sequence[float]) -> List[float]:
    arr = np.asarray(vec, dtype=np.float32)
    norm = float(np.linalg.norm(arr))
    return (arr / norm).tolist() if norm > 0 else arr.tolist()


class ClauseIndex:
    """Append-only clause vector index on top of LangChain's FAISS wrapper.

    The FAISS index is created on the first insert, sized to that vector.
    Blocking embedding and FAISS calls run in worker threads. Every touch of
    the FAISS store holds one thread lock, so a search never sees a vector
    whose docstore mapping is not written yet. Errors propagate unchanged.
    """

    def __init__(self, config: AppConfig, embeddings: Embeddings):
        self.config = config
        self.embeddings = embeddings
        self.index_path = os.path.join(config.workspace_dir, config.index_name)
        self.store: Optional[FAISS] = None
        self._lock = threading.Lock()
        if os.path.exists(self.index_path):
            self.store = FAISS.load_local(
                self.index_path, embeddings, allow_dangerous_deserialization=True, **STORE_KWARGS
            )
            logger.info("Loaded clause index from %s (%d records)", self.index_path, len(self))

    def __len__(self) -> int:
        return 0 if self.store is None else self.store.index.ntotal

    async def embed(self, text: str) -> List[float]:
        return await asyncio.to_thread(self.embeddings.embed_query, text)

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self.embeddings.embed_documents, list(texts))

    def _new_store(self, dim: int) -> FAISS:
        return FAISS(
            embedding_function=self.embeddings,
            index=faiss.IndexFlatIP(dim),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            **STORE_KWARGS,
        )

    def _add(self, records: List[IndexedClauseRecord]) -> List[str]:
        with self._lock:
            if self.store is None:
                self.store = self._new_store(len(records[0].embedding))
            return self.store.add_embeddings(
                [(r.text, unit_vector(r.embedding)) for r in records],
                metadatas=[dict(r.metadata) for r in records],
            )

    async def index(self, record: IndexedClauseRecord) -> str:
        ids = await self.index_batch([record])
        return ids[0]

    async def index_batch(self, records: Sequence[IndexedClauseRecord]) -> List[str]:
        records = list(records)
        if not records:
            return []
        ids = await asyncio.to_thread(self._add, records)
        logger.debug("Indexed %d clause record(s)", len(ids))
        return ids

    async def index_clauses(self, items: Sequence[Tuple[str, Dict[str, Any]]]) -> List[str]:
        """Embed and insert (text, metadata) pairs; ``analyzedAt`` is stamped here."""
        items = list(items)
        if not items:
            return []
        vectors = await self.embed_batch([text for text, _ in items])
        analyzed_at = utcnow().isoformat()
        records = [
            IndexedClauseRecord(text=text, embedding=vec, metadata={**meta, "analyzedAt": analyzed_at})
            for (text, meta), vec in zip(items, vectors)
        ]
        return await self.index_batch(records)

    def _search(self, vector: List[float], k: int) -> List[SearchHit]:
        with self._lock:
            pairs = self.store.similarity_search_with_score_by_vector(unit_vector(vector), k=k)
        return [
            SearchHit(
                record_id=getattr(doc, "id", None) or "",
                text=doc.page_content,
                metadata=dict(doc.metadata),
                score=float(score),
            )
            for doc, score in pairs
        ]

    async def search(self, query_vector: List[float], k: int = 5) -> List[SearchHit]:
        if self.store is None or len(self) == 0:
            return []
        return await asyncio.to_thread(self._search, query_vector, k)

    async def search_text(self, query: str, k: int = 5) -> List[SearchHit]:
        if self.store is None:
            return []
        vector = await self.embed(query)
        return await self.search(vector, k)

    def _save(self) -> None:
        with self._lock:
            self.store.save_local(self.index_path)

    async def save(self) -> None:
        if self.store is None:
            return
        os.makedirs(self.config.workspace_dir, exist_ok=True)
        await asyncio.to_thread(self._save)
        logger.info("Saved clause index to %s", self.index_path)

    async def close(self) -> None:
        await self.save()
        self.store = None
