# ============================================================================
# src/nanopore_ingestion/vector/retrieval.py
# ============================================================================
"""
Retrieval-Augmented Answering

1. Embed the question
2. Fetch nearest indexed documents above a score threshold
3. Build context from their text (caller context first)
4. Ask the generation model to answer from that context only
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time
import logging

from .base import BaseVectorStore, SearchHit
from ..config import OllamaSettings, VectorSettings, ollama_settings, vector_settings
from ..core.confidence import clamp_confidence
from ..llm.base import BaseLLMClient
from ..llm.prompts import build_answer_prompt


logger = logging.getLogger(__name__)

HEDGING_PHRASES = ("i don't know", "not sure")


@dataclass
class RAGAnswer:
    answer: str
    confidence: float
    sources: List[str] = field(default_factory=list)
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "confidence": self.confidence,
            "sources": list(self.sources),
            "latency_ms": self.latency_ms,
        }


def answer_confidence(answer: str) -> float:
    """
    Heuristic answer confidence.

    0.5 base, +0.2 for answers over 50 characters, -0.3 for hedging,
    +0.1 for structured answers (colon or dash). Clamped to [0, 1].
    """
    confidence = 0.5
    lowered = answer.lower()

    if len(answer) > 50:
        confidence += 0.2
    if any(phrase in lowered for phrase in HEDGING_PHRASES):
        confidence -= 0.3
    if ':' in answer or '-' in answer:
        confidence += 0.1

    return clamp_confidence(confidence)


class RetrievalAnswerer:

    def __init__(
        self,
        client: BaseLLMClient,
        store: BaseVectorStore,
        ollama_config: Optional[OllamaSettings] = None,
        vector_config: Optional[VectorSettings] = None
    ):
        self.client = client
        self.store = store
        ollama_config = ollama_config or ollama_settings
        vector_config = vector_config or vector_settings
        self.temperature = ollama_config.ANSWER_TEMPERATURE
        self.max_tokens = ollama_config.ANSWER_MAX_TOKENS
        self.default_limit = vector_config.SEARCH_LIMIT
        self.default_threshold = vector_config.SEARCH_SCORE_THRESHOLD

    async def retrieve(
        self,
        query: str,
        limit: Optional[int] = None,
        score_threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[SearchHit]:
        vector = await self.client.embed(query)
        return await self.store.search(
            vector,
            limit=limit or self.default_limit,
            score_threshold=self.default_threshold if score_threshold is None else score_threshold,
            filters=filters,
        )

    async def answer(
        self,
        question: str,
        context: Optional[str] = None,
        limit: Optional[int] = None,
        score_threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> RAGAnswer:
        """
        Answer a question from the indexed corpus.

        Raises:
            ExternalServiceError: embedding, search or generation failed
        """
        start = time.perf_counter()

        hits = await self.retrieve(question, limit, score_threshold, filters)
        sources = [self._hit_text(hit) for hit in hits]
        sources = [s for s in sources if s]

        parts = ([context] if context else []) + sources
        prompt = build_answer_prompt(question, "\n\n".join(parts))

        response = await self.client.generate(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        answer = response.get("text", "").strip()
        latency_ms = (time.perf_counter() - start) * 1000

        logger.info(f"Answered question from {len(sources)} sources in {latency_ms:.0f}ms")

        return RAGAnswer(
            answer=answer,
            confidence=answer_confidence(answer),
            sources=sources,
            latency_ms=latency_ms,
        )

    @staticmethod
    def _hit_text(hit: SearchHit) -> str:
        return str(hit.payload.get("text") or hit.payload.get("title") or "")
