# ============================================================================
# src/nanopore_ingestion/config/ollama_config.py
# ============================================================================
"""
Text-Generation Endpoint Configuration (Ollama)
- Host and models
- Sampling temperature per task
- Output token budgets
- Request timeout
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OllamaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OLLAMA_HOST: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL"
    )
    OLLAMA_MODEL: str = Field(
        default="llama2",
        description="Generation model used for extraction, validation and answers"
    )
    OLLAMA_EMBEDDING_MODEL: str = Field(
        default="nomic-embed-text",
        description="Model invoked in embedding mode"
    )
    OLLAMA_TIMEOUT: int = Field(
        default=30,
        description="Per-request timeout (seconds); no retry on expiry"
    )
    EXTRACTION_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0, le=2.0,
        description="Low temperature keeps field extraction close to the source text"
    )
    EXTRACTION_MAX_TOKENS: int = Field(
        default=1000,
        description="Output token budget for field extraction"
    )
    ANSWER_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0, le=2.0,
        description="Temperature for retrieval-augmented answers"
    )
    ANSWER_MAX_TOKENS: int = Field(
        default=800,
        description="Output token budget for retrieval-augmented answers"
    )
    VALIDATION_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0, le=2.0,
        description="Temperature for model-assisted form validation"
    )
    VALIDATION_MAX_TOKENS: int = Field(
        default=500,
        description="Output token budget for model-assisted form validation"
    )


ollama_settings = OllamaSettings()
