from __future__ import annotations
from typing import List
from clausescope.utils.exception import NoRelevantContent
from clausescope.utils.types import SearchHit
from clausescope.vectorstore.faiss_store import ClauseIndex


async def retrieve(index: ClauseIndex, query: str, k: int = 5) -> List[SearchHit]:
    return await index.search_text(query, k=k)


async def retrieve_required(index: ClauseIndex, query: str, k: int = 5) -> List[SearchHit]:
    """Like ``retrieve`` but an empty result is a NoRelevantContent outcome."""
    hits = await retrieve(index, query, k)
    if not hits:
        raise NoRelevantContent(f"No relevant clauses found for: {query}")
    return hits
