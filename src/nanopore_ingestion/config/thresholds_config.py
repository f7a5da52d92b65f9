# ============================================================================
# src/nanopore_ingestion/config/thresholds_config.py
# ============================================================================
"""
Confidence and Heuristic Thresholds
- Low-confidence warning
- Validation suggestion gate
- Page attribution and scanned-document heuristics
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThresholdSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOW_CONFIDENCE_WARNING: float = Field(
        default=0.5,
        ge=0.0, le=1.0,
        description="Fused fields below this confidence produce a result warning"
    )
    VALIDATION_SUGGESTION_THRESHOLD: float = Field(
        default=0.8,
        ge=0.0, le=1.0,
        description="Validation scores below this add a review suggestion"
    )
    LINES_PER_PAGE: int = Field(
        default=50,
        description="Line count used to estimate the page of a pattern match"
    )
    SCANNED_TEXT_MIN_LENGTH: int = Field(
        default=100,
        description="Extracted text shorter than this suggests a scanned document"
    )
    SCANNED_MIN_LINES: int = Field(
        default=5,
        description="Fewer lines than this suggests a scanned document"
    )


threshold_settings = ThresholdSettings()
