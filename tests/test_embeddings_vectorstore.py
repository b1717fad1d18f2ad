import asyncio
from dataclasses import replace
import pytest
from clausescope.embeddings.embeddings import HashingEmbedding, get_embedding_model
from clausescope.utils.exception import ValidationError
from clausescope.utils.types import IndexedClauseRecord
from clausescope.vectorstore.faiss_store import ClauseIndex

CLAUSES = [
    "Payment shall be made within 30 days of the invoice date by bank transfer.",
    "Either party may terminate this agreement with sixty days written notice.",
    "All disputes will be resolved by binding arbitration in the state of Delaware.",
]


def meta(category):
    return {"category": category, "riskLevel": "LOW", "sourceUrl": "direct-input"}


def test_hashing_embedding_is_deterministic():
    emb = HashingEmbedding(dim=32)
    a = emb.embed_query("Payment terms apply")
    assert a == emb.embed_query("payment TERMS apply")
    assert len(a) == 32
    assert emb.embed_documents(["x", "y"])[1] == emb.embed_query("y")


def test_provider_selection(config):
    assert isinstance(get_embedding_model(config), HashingEmbedding)
    with pytest.raises(ValidationError):
        get_embedding_model(replace(config, embed_provider="word2vec"))


def test_embed_batch_preserves_order(config, embeddings):
    index = ClauseIndex(config, embeddings)
    vectors = asyncio.run(index.embed_batch(CLAUSES))
    assert len(vectors) == len(CLAUSES)
    assert vectors[2] == embeddings.embed_query(CLAUSES[2])
    assert asyncio.run(index.embed_batch([])) == []


def test_empty_store_returns_no_hits(config, embeddings):
    index = ClauseIndex(config, embeddings)
    assert asyncio.run(index.search_text("payment", k=5)) == []
    assert asyncio.run(index.search([0.1] * 256, k=5)) == []
    assert len(index) == 0


def test_self_similarity_is_top_hit(config, embeddings):
    index = ClauseIndex(config, embeddings)
    asyncio.run(index.index_clauses([(c, meta(cat)) for c, cat in zip(CLAUSES, ["payment", "termination", "arbitration"])]))
    for text in CLAUSES:
        hits = asyncio.run(index.search_text(text, k=3))
        assert hits[0].text == text
        assert hits[0].score == pytest.approx(1.0, abs=1e-4)
        assert [h.score for h in hits] == sorted((h.score for h in hits), reverse=True)


def test_index_single_record_and_metadata(config, embeddings):
    index = ClauseIndex(config, embeddings)
    vec = embeddings.embed_query(CLAUSES[0])
    record_id = asyncio.run(index.index(IndexedClauseRecord(text=CLAUSES[0], embedding=vec, metadata=meta("payment"))))
    assert record_id
    hits = asyncio.run(index.search(vec, k=10))
    assert len(hits) == 1
    assert hits[0].category == "payment"
    assert hits[0].metadata["sourceUrl"] == "direct-input"


def test_index_is_append_only(config, embeddings):
    index = ClauseIndex(config, embeddings)
    items = [(CLAUSES[0], meta("payment"))]
    asyncio.run(index.index_clauses(items))
    asyncio.run(index.index_clauses(items))
    hits = asyncio.run(index.search_text(CLAUSES[0], k=5))
    assert len(hits) == 2
    assert hits[0].text == hits[1].text


def test_index_persists_across_reload(config, embeddings):
    index = ClauseIndex(config, embeddings)
    asyncio.run(index.index_clauses([(c, meta("other")) for c in CLAUSES]))
    asyncio.run(index.close())
    reloaded = ClauseIndex(config, embeddings)
    assert len(reloaded) == 3
    hits = asyncio.run(reloaded.search_text(CLAUSES[1], k=1))
    assert hits[0].text == CLAUSES[1]


def test_concurrent_indexing_and_search(config, embeddings):
    index = ClauseIndex(config, embeddings)
    asyncio.run(index.index_clauses([(CLAUSES[0], meta("payment"))]))

    async def writer(batch):
        items = [(f"{CLAUSES[batch % 3]} Batch {batch} item {i}.", meta("other")) for i in range(100)]
        return await index.index_clauses(items)

    async def reader():
        hits = []
        for _ in range(10):
            hits = await index.search_text(CLAUSES[1], k=50)
        return hits

    async def run():
        return await asyncio.gather(*[writer(b) for b in range(20)], *[reader() for _ in range(8)])

    results = asyncio.run(run())
    assert all(len(ids) == 100 for ids in results[:20])
    assert all(0 < len(hits) <= 50 for hits in results[20:])
    assert all(h.text for hits in results[20:] for h in hits)
    assert len(index) == 1 + 20 * 100
