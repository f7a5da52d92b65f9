# src/nanopore_ingestion/core/context/__init__.py

from .enums import ConfidenceLevel, FieldSource, ProcessingStatus, ProcessingType
from .extracted_field import BoundingBox, ExtractedField
from .job import ExtractionJob, ProcessingResult

__all__ = [
    "ConfidenceLevel",
    "FieldSource",
    "ProcessingStatus",
    "ProcessingType",
    "BoundingBox",
    "ExtractedField",
    "ExtractionJob",
    "ProcessingResult",
]
