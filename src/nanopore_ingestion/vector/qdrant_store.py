# ============================================================================
# src/nanopore_ingestion/vector/qdrant_store.py
# ============================================================================
"""
Qdrant Vector Store

Async wrapper around qdrant-client for the indexed sample-form corpus.
One collection, cosine distance, fixed vector size. The collection is
created on first use.
"""

from typing import Any, Awaitable, Dict, List, Optional, TypeVar
import logging

from qdrant_client import AsyncQdrantClient, models

from .base import BaseVectorStore, EmbeddingRecord, SearchHit
from ..config import VectorSettings, vector_settings
from ..utils.exceptions import ExternalServiceError


logger = logging.getLogger(__name__)

T = TypeVar("T")

_DISTANCES = {
    "cosine": models.Distance.COSINE,
    "dot": models.Distance.DOT,
    "euclid": models.Distance.EUCLID,
}


class QdrantVectorStore(BaseVectorStore):
    """
    Qdrant-backed store.

    Args:
        settings: Connection, collection and vector size settings
        client: Pre-built AsyncQdrantClient (built from settings if omitted)
    """

    SERVICE = "qdrant"

    def __init__(
        self,
        settings: Optional[VectorSettings] = None,
        client: Optional[AsyncQdrantClient] = None
    ):
        self.settings = settings or vector_settings
        self.collection_name = self.settings.QDRANT_COLLECTION
        self.vector_size = self.settings.VECTOR_SIZE
        self.client = client or AsyncQdrantClient(
            url=self.settings.QDRANT_URL,
            api_key=self.settings.QDRANT_API_KEY,
            timeout=self.settings.QDRANT_TIMEOUT,
        )
        self._collection_ready = False

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except ExternalServiceError:
            raise
        except Exception as e:
            logger.error(f"Qdrant {operation} failed on '{self.collection_name}': {e}")
            raise ExternalServiceError(
                f"Vector store {operation} failed: {e}",
                service=self.SERVICE,
                status_code=getattr(e, "status_code", None),
            ) from e

    async def create_collection(
        self,
        name: Optional[str] = None,
        vector_size: Optional[int] = None,
        distance: str = "cosine"
    ) -> None:
        if distance not in _DISTANCES:
            raise ValueError(f"Unsupported distance metric: {distance}")
        name = name or self.collection_name
        await self._call("create_collection", self.client.create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(
                size=vector_size or self.vector_size,
                distance=_DISTANCES[distance],
            ),
        ))
        logger.info(f"Created Qdrant collection '{name}'")

    async def ensure_collection(self) -> bool:
        if self._collection_ready:
            return False

        exists = await self._call(
            "collection_exists",
            self.client.collection_exists(collection_name=self.collection_name)
        )
        created = False
        if not exists:
            logger.info(f"Creating Qdrant collection '{self.collection_name}'")
            await self.create_collection()
            created = True

        self._collection_ready = True
        return created

    async def upsert(self, records: List[EmbeddingRecord]) -> None:
        points = [
            models.PointStruct(id=r.id, vector=r.vector, payload=r.payload)
            for r in records
        ]
        await self._call("upsert", self.client.upsert(
            collection_name=self.collection_name,
            points=points,
            wait=True,
        ))

    @staticmethod
    def _build_filter(filters: Optional[Dict[str, Any]]) -> Optional[models.Filter]:
        if not filters:
            return None
        return models.Filter(must=[
            models.FieldCondition(key=key, match=models.MatchValue(value=value))
            for key, value in filters.items()
        ])

    async def search(
        self,
        vector: List[float],
        limit: int = 10,
        score_threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[SearchHit]:
        response = await self._call("search", self.client.query_points(
            collection_name=self.collection_name,
            query=vector,
            limit=limit,
            score_threshold=score_threshold,
            query_filter=self._build_filter(filters),
            with_payload=True,
        ))
        return [
            SearchHit(id=str(point.id), score=point.score, payload=point.payload or {})
            for point in response.points
        ]

    async def get(self, ids: List[str]) -> List[EmbeddingRecord]:
        points = await self._call("retrieve", self.client.retrieve(
            collection_name=self.collection_name,
            ids=ids,
            with_payload=True,
            with_vectors=True,
        ))
        return [
            EmbeddingRecord(
                id=str(point.id),
                vector=list(point.vector or []),
                payload=point.payload or {},
            )
            for point in points
        ]

    async def update_payload(self, record_id: str, payload: Dict[str, Any]) -> None:
        await self._call("overwrite_payload", self.client.overwrite_payload(
            collection_name=self.collection_name,
            payload=payload,
            points=[record_id],
            wait=True,
        ))

    async def delete(self, ids: List[str]) -> None:
        await self._call("delete", self.client.delete(
            collection_name=self.collection_name,
            points_selector=models.PointIdsList(points=ids),
            wait=True,
        ))

    async def stats(self) -> Dict[str, Any]:
        info = await self._call(
            "get_collection",
            self.client.get_collection(collection_name=self.collection_name)
        )
        vectors_config = info.config.params.vectors
        vector_size = getattr(vectors_config, "size", None)
        return {
            "total_points": info.points_count or 0,
            "vector_size": vector_size,
            "indexed_vectors": info.indexed_vectors_count or 0,
        }

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._call("get_collections", self.client.get_collections())
        except ExternalServiceError as e:
            return {"healthy": False, "collection": self.collection_name, "details": str(e)}
        return {
            "healthy": True,
            "collection": self.collection_name,
            "details": "Qdrant reachable",
        }

    async def close(self) -> None:
        await self.client.close()
