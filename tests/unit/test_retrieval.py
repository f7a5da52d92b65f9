# ============================================================================
# FILE: tests/unit/test_retrieval.py
# ============================================================================
"""
Unit tests for embedding indexing and retrieval-augmented answers
"""

import pytest

from conftest import FakeLLMClient, FakeVectorStore
from nanopore_ingestion.core.context.extracted_field import ExtractedField
from nanopore_ingestion.utils.exceptions import ExternalServiceError
from nanopore_ingestion.vector.base import EmbeddingRecord
from nanopore_ingestion.vector.embedding_indexer import EmbeddingIndexer
from nanopore_ingestion.vector.retrieval import RetrievalAnswerer, answer_confidence


def test_hedging_short_answer():
    """Short hedging answer: 0.5 - 0.3"""
    assert answer_confidence("I'm not sure about that") == pytest.approx(0.2)


def test_long_structured_answer():
    answer = "The sample S-100 was submitted by Jane Smith: concentration 25.5 ng/ul."
    assert answer_confidence(answer) == pytest.approx(0.8)


def test_confidence_never_negative():
    for answer in ["", "i don't know", "I don't know - not sure"]:
        assert 0.0 <= answer_confidence(answer) <= 1.0


@pytest.mark.asyncio
async def test_indexer_payload_and_collection():
    client = FakeLLMClient(vector=[1.0, 0.0, 0.0, 0.0])
    store = FakeVectorStore()
    indexer = EmbeddingIndexer(client, store)

    record = await indexer.index(
        "job-1",
        "Sample Name: S-1",
        [ExtractedField("sample_name", "S-1", 0.8)],
        metadata={"sample_id": "S-1", "file_name": "form.pdf"},
    )

    assert store.collection_created
    assert store.records["job-1"] is record
    assert record.vector == [1.0, 0.0, 0.0, 0.0]
    assert record.payload["text"] == "Sample Name: S-1"
    assert record.payload["fields"] == {"sample_name": "S-1"}
    assert record.payload["file_name"] == "form.pdf"


@pytest.mark.asyncio
async def test_indexer_failure_propagates():
    store = FakeVectorStore(error=ExternalServiceError("qdrant down", service="qdrant"))
    indexer = EmbeddingIndexer(FakeLLMClient(), store)

    with pytest.raises(ExternalServiceError):
        await indexer.index("job-1", "text", [])


@pytest.mark.asyncio
async def test_answer_uses_context_and_sources():
    client = FakeLLMClient("Jane Smith submitted it: sample S-100 for sequencing runs today.")
    store = FakeVectorStore()
    store.records["a"] = EmbeddingRecord("a", [0.1], {"text": "Submitter: Jane Smith"})
    store.records["b"] = EmbeddingRecord("b", [0.1], {"title": "Form S-100"})

    answerer = RetrievalAnswerer(client, store)
    answer = await answerer.answer("Who submitted S-100?", context="Lab intake notes", limit=5)

    assert answer.sources == ["Submitter: Jane Smith", "Form S-100"]
    prompt = client.prompts[0]
    assert prompt.index("Lab intake notes") < prompt.index("Submitter: Jane Smith")
    assert "Question: Who submitted S-100?" in prompt
    assert client.calls[0]["temperature"] == pytest.approx(0.2)
    assert client.calls[0]["max_tokens"] == 800
    assert answer.confidence == pytest.approx(0.8)
    assert answer.latency_ms >= 0


@pytest.mark.asyncio
async def test_retrieve_passes_limit_threshold_and_filters():
    store = FakeVectorStore(score=0.5)
    store.records["a"] = EmbeddingRecord("a", [0.1], {"text": "x", "sample_id": "S-1"})
    answerer = RetrievalAnswerer(FakeLLMClient(), store)

    assert await answerer.retrieve("query", limit=3, score_threshold=0.7) == []
    hits = await answerer.retrieve("query", limit=3, score_threshold=0.4, filters={"sample_id": "S-1"})

    assert [h.id for h in hits] == ["a"]
    assert store.searches[-1] == {"limit": 3, "score_threshold": 0.4, "filters": {"sample_id": "S-1"}}


@pytest.mark.asyncio
async def test_retrieve_defaults_from_settings():
    store = FakeVectorStore()
    answerer = RetrievalAnswerer(FakeLLMClient(), store)

    await answerer.retrieve("query")

    assert store.searches[0]["limit"] == 10
    assert store.searches[0]["score_threshold"] == pytest.approx(0.7)
