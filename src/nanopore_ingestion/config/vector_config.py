# ============================================================================
# src/nanopore_ingestion/config/vector_config.py
# ============================================================================
"""
Vector Store Configuration (Qdrant)
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    QDRANT_URL: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL"
    )
    QDRANT_API_KEY: Optional[str] = Field(
        default=None,
        description="Qdrant API key (optional for local deployments)"
    )
    QDRANT_COLLECTION: str = Field(
        default="nanopore_docs",
        description="Collection holding indexed sample-form documents"
    )
    QDRANT_TIMEOUT: int = Field(
        default=30,
        description="Per-request timeout (seconds)"
    )
    VECTOR_SIZE: int = Field(
        default=768,
        description="Embedding dimension; must match the embedding model"
    )
    SEARCH_LIMIT: int = Field(
        default=10,
        ge=1, le=100,
        description="Default number of neighbours returned by a search"
    )
    SEARCH_SCORE_THRESHOLD: float = Field(
        default=0.7,
        ge=0.0, le=1.0,
        description="Default minimum cosine similarity for search hits"
    )


vector_settings = VectorSettings()
