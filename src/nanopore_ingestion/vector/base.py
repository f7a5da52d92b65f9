# ============================================================================
# src/nanopore_ingestion/vector/base.py
# ============================================================================
"""
Vector store interface used by the indexer and the retrieval answerer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class EmbeddingRecord:
    """One indexed document: id, vector and payload."""
    id: str
    vector: List[float]
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchHit:
    id: str
    score: float
    payload: Dict[str, Any] = field(default_factory=dict)


class BaseVectorStore(ABC):
    """
    Abstract vector store.

    Every method raises ExternalServiceError when the backend fails.
    """

    @abstractmethod
    async def ensure_collection(self) -> bool:
        """Create the collection if missing. Returns True if it was created."""
        pass

    @abstractmethod
    async def upsert(self, records: List[EmbeddingRecord]) -> None:
        pass

    @abstractmethod
    async def search(
        self,
        vector: List[float],
        limit: int = 10,
        score_threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[SearchHit]:
        """Nearest neighbours, best first, with payload."""
        pass

    @abstractmethod
    async def get(self, ids: List[str]) -> List[EmbeddingRecord]:
        pass

    @abstractmethod
    async def update_payload(self, record_id: str, payload: Dict[str, Any]) -> None:
        """Replace a record's payload."""
        pass

    @abstractmethod
    async def delete(self, ids: List[str]) -> None:
        pass

    @abstractmethod
    async def stats(self) -> Dict[str, Any]:
        """{"total_points", "vector_size", "indexed_vectors"}"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        pass

    async def close(self) -> None:
        return None
