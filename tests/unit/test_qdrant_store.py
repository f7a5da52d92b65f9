# ============================================================================
# FILE: tests/unit/test_qdrant_store.py
# ============================================================================
"""
Qdrant store tests against qdrant-client's in-process local mode
"""

import uuid

import pytest
from qdrant_client import AsyncQdrantClient

from nanopore_ingestion.config import VectorSettings
from nanopore_ingestion.utils.exceptions import ExternalServiceError
from nanopore_ingestion.vector.base import EmbeddingRecord
from nanopore_ingestion.vector.qdrant_store import QdrantVectorStore


@pytest.fixture
def store():
    settings = VectorSettings(QDRANT_COLLECTION="test_docs", VECTOR_SIZE=4)
    return QdrantVectorStore(settings, client=AsyncQdrantClient(location=":memory:"))


def record(vector, **payload):
    return EmbeddingRecord(id=str(uuid.uuid4()), vector=vector, payload=payload)


@pytest.mark.asyncio
async def test_ensure_collection_creates_once(store):
    assert await store.ensure_collection() is True
    assert await store.ensure_collection() is False

    stats = await store.stats()
    assert stats["total_points"] == 0
    assert stats["vector_size"] == 4


@pytest.mark.asyncio
async def test_upsert_and_search(store):
    await store.ensure_collection()
    near = record([1.0, 0.0, 0.0, 0.0], sample_id="S-1", text="first")
    far = record([0.0, 1.0, 0.0, 0.0], sample_id="S-2", text="second")
    await store.upsert([near, far])

    hits = await store.search([1.0, 0.1, 0.0, 0.0], limit=10, score_threshold=0.7)

    assert [h.id for h in hits] == [near.id]
    assert hits[0].payload["text"] == "first"
    assert hits[0].score > 0.9


@pytest.mark.asyncio
async def test_search_filters(store):
    await store.ensure_collection()
    a = record([1.0, 0.0, 0.0, 0.0], sample_id="S-1")
    b = record([0.9, 0.1, 0.0, 0.0], sample_id="S-2")
    await store.upsert([a, b])

    hits = await store.search([1.0, 0.0, 0.0, 0.0], filters={"sample_id": "S-2"})
    assert [h.id for h in hits] == [b.id]


@pytest.mark.asyncio
async def test_get_update_delete(store):
    await store.ensure_collection()
    r = record([0.0, 0.0, 1.0, 0.0], status="new")
    await store.upsert([r])

    [fetched] = await store.get([r.id])
    assert fetched.payload == {"status": "new"}
    assert len(fetched.vector) == 4

    await store.update_payload(r.id, {"status": "reviewed"})
    [fetched] = await store.get([r.id])
    assert fetched.payload == {"status": "reviewed"}

    await store.delete([r.id])
    assert await store.get([r.id]) == []


@pytest.mark.asyncio
async def test_missing_collection_is_external_service_error(store):
    with pytest.raises(ExternalServiceError) as exc_info:
        await store.stats()
    assert exc_info.value.service == "qdrant"


@pytest.mark.asyncio
async def test_unsupported_distance(store):
    with pytest.raises(ValueError):
        await store.create_collection(distance="manhattan")


@pytest.mark.asyncio
async def test_health_check(store):
    health = await store.health_check()
    assert health["healthy"] is True
    assert health["collection"] == "test_docs"
