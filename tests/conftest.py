# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.

External services (text generation, vector store) are replaced with
in-memory fakes passed in through constructors.
"""

import io
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from nanopore_ingestion.core.job_store import InMemoryJobRepository
from nanopore_ingestion.core.service import ProcessingService
from nanopore_ingestion.core.template_repository import TemplateRepository
from nanopore_ingestion.llm.base import BaseLLMClient
from nanopore_ingestion.vector.base import BaseVectorStore, EmbeddingRecord, SearchHit


class FakeLLMClient(BaseLLMClient):
    """
    Scripted generation client.

    reply is either a fixed string or a callable(prompt) -> str.
    """

    def __init__(
        self,
        reply: Union[str, Callable[[str], str]] = "{}",
        vector: Optional[List[float]] = None,
        error: Optional[Exception] = None,
        healthy: bool = True
    ):
        super().__init__()
        self.reply = reply
        self.vector = vector or [0.1, 0.2, 0.3, 0.4]
        self.error = error
        self.healthy = healthy
        self.prompts: List[str] = []
        self.calls: List[Dict[str, Any]] = []
        self.embedded: List[str] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate(self, prompt, model=None, temperature=None, max_tokens=None, json_mode=False):
        self.prompts.append(prompt)
        self.calls.append({"temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        text = self.reply(prompt) if callable(self.reply) else self.reply
        self._inference_count += 1
        return {
            "text": text,
            "model": self.model_name,
            "prompt_tokens": 0,
            "generated_tokens": 0,
            "inference_time": 0.0,
        }

    async def embed(self, text, model=None):
        self.embedded.append(text)
        if self.error is not None:
            raise self.error
        self._embedding_count += 1
        return list(self.vector)

    async def health_check(self):
        return {"healthy": self.healthy, "model": self.model_name, "details": "fake"}


class FakeVectorStore(BaseVectorStore):
    """Dict-backed store; every record scores `score` against any query."""

    def __init__(self, score: float = 0.9, error: Optional[Exception] = None):
        self.records: Dict[str, EmbeddingRecord] = {}
        self.score = score
        self.error = error
        self.collection_created = False
        self.searches: List[Dict[str, Any]] = []

    async def ensure_collection(self):
        if self.error is not None:
            raise self.error
        created = not self.collection_created
        self.collection_created = True
        return created

    async def upsert(self, records):
        if self.error is not None:
            raise self.error
        for record in records:
            self.records[record.id] = record

    async def search(self, vector, limit=10, score_threshold=None, filters=None):
        self.searches.append({"limit": limit, "score_threshold": score_threshold, "filters": filters})
        if self.error is not None:
            raise self.error
        if score_threshold is not None and self.score < score_threshold:
            return []
        hits = [
            SearchHit(id=r.id, score=self.score, payload=r.payload)
            for r in self.records.values()
            if all(r.payload.get(k) == v for k, v in (filters or {}).items())
        ]
        return hits[:limit]

    async def get(self, ids):
        return [self.records[i] for i in ids if i in self.records]

    async def update_payload(self, record_id, payload):
        self.records[record_id].payload = dict(payload)

    async def delete(self, ids):
        for i in ids:
            self.records.pop(i, None)

    async def stats(self):
        return {"total_points": len(self.records), "vector_size": 4, "indexed_vectors": 0}

    async def health_check(self):
        return {"healthy": self.error is None, "collection": "fake", "details": "fake"}


def build_pdf(lines: List[str], pages: int = 1) -> bytes:
    """Render lines into a PDF, split evenly across pages."""
    from reportlab.lib.pagesizes import letter
    from reportlab.pdfgen import canvas

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    per_page = max(-(-len(lines) // pages), 1)

    for page in range(pages):
        y = 750
        for line in lines[page * per_page:(page + 1) * per_page]:
            c.drawString(72, y, line)
            y -= 20
        c.showPage()

    c.save()
    return buffer.getvalue()


@pytest.fixture
def templates():
    return TemplateRepository()


@pytest.fixture
def nanopore_template(templates):
    return templates.get("nanopore_sample_form")


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def fake_store():
    return FakeVectorStore()


@pytest.fixture
def jobs():
    return InMemoryJobRepository()


@pytest.fixture
def service(fake_llm, fake_store, jobs, templates):
    return ProcessingService(
        client=fake_llm,
        store=fake_store,
        jobs=jobs,
        templates=templates,
    )


@pytest.fixture
def sample_form_lines():
    return [
        "Nanopore Sample Submission Form",
        "Sample Name: S-100",
        "Project ID: PRJ-42",
        "Submitter: Jane Smith",
        "Email: jane.smith@example.org",
        "Laboratory: Genomics Core",
        "Sample Type: DNA",
        "Concentration: 25.5 ng/ul",
        "Volume: 30 ul",
        "Priority: high",
    ]


@pytest.fixture
def sample_form_pdf(sample_form_lines):
    return build_pdf(sample_form_lines)
