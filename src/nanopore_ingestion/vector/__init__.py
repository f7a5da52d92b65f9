"""
Vector indexing and retrieval.
"""

from .base import BaseVectorStore, EmbeddingRecord, SearchHit
from .qdrant_store import QdrantVectorStore
from .embedding_indexer import EmbeddingIndexer
from .retrieval import RAGAnswer, RetrievalAnswerer, answer_confidence

__all__ = [
    "BaseVectorStore",
    "EmbeddingRecord",
    "SearchHit",
    "QdrantVectorStore",
    "EmbeddingIndexer",
    "RAGAnswer",
    "RetrievalAnswerer",
    "answer_confidence",
]
