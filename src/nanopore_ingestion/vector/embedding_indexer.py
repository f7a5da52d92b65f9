# ============================================================================
# src/nanopore_ingestion/vector/embedding_indexer.py
# ============================================================================
"""
Embedding Indexer

Embeds a processed document and upserts it with its fused fields and
caller metadata. Indexing is part of the pipeline, so failures propagate.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from .base import BaseVectorStore, EmbeddingRecord
from ..core.context.extracted_field import ExtractedField
from ..llm.base import BaseLLMClient
from ..utils.logging import log_performance


logger = logging.getLogger(__name__)


class EmbeddingIndexer:

    def __init__(self, client: BaseLLMClient, store: BaseVectorStore):
        self.client = client
        self.store = store

    @log_performance(logger, "Document indexing")
    async def index(
        self,
        record_id: str,
        text: str,
        fields: List[ExtractedField],
        metadata: Optional[Dict[str, Any]] = None
    ) -> EmbeddingRecord:
        """
        Embed and upsert one document.

        Raises:
            ExternalServiceError: embedding or vector store call failed
        """
        vector = await self.client.embed(text)
        await self.store.ensure_collection()

        payload: Dict[str, Any] = dict(metadata or {})
        payload.update({
            "text": text,
            "fields": {f.field_name: f.value for f in fields},
            "indexed_at": datetime.now(timezone.utc).isoformat(),
        })

        record = EmbeddingRecord(id=record_id, vector=vector, payload=payload)
        await self.store.upsert([record])

        logger.info(f"Indexed document {record_id} ({len(vector)}-dim, {len(fields)} fields)")
        return record
