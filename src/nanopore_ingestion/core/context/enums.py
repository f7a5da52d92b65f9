# ============================================================================
# src/nanopore_ingestion/core/context/enums.py
# ============================================================================
"""
Processing Enums
- Confidence levels
- Job status and processing type
- Field provenance
"""

from enum import Enum


class ConfidenceLevel(str, Enum):
    LOW = "low"              # < 0.5
    MEDIUM = "medium"        # 0.5 - 0.7
    HIGH = "high"            # 0.7 - 0.9
    VERY_HIGH = "very_high"  # >= 0.9


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingType(str, Enum):
    PDF_EXTRACTION = "pdf_extraction"
    AI_EXTRACTION = "ai_extraction"
    FORM_VALIDATION = "form_validation"
    DATA_ENRICHMENT = "data_enrichment"


class FieldSource(str, Enum):
    PATTERN = "pattern"
    LANGUAGE_MODEL = "language_model"
