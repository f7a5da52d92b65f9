"""
Core extraction pipeline: job records, confidence, fusion, orchestration.

Heavier modules (pipeline, service) are imported from their own modules
to keep this package import light.
"""

from .context import (
    ConfidenceLevel,
    FieldSource,
    ProcessingStatus,
    ProcessingType,
    BoundingBox,
    ExtractedField,
    ExtractionJob,
    ProcessingResult,
)
from .confidence import clamp_confidence, confidence_level_for, mean_confidence

__all__ = [
    "ConfidenceLevel",
    "FieldSource",
    "ProcessingStatus",
    "ProcessingType",
    "BoundingBox",
    "ExtractedField",
    "ExtractionJob",
    "ProcessingResult",
    "clamp_confidence",
    "confidence_level_for",
    "mean_confidence",
]
