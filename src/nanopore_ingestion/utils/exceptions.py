# ============================================================================
# src/nanopore_ingestion/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the nanopore ingestion engine.
"""

from typing import Optional


class NanoporeIngestionError(Exception):
    """Base exception for all ingestion errors."""
    pass


class ExtractionError(NanoporeIngestionError):
    """Document is malformed or cannot be read as a PDF."""
    pass


class ExternalServiceError(NanoporeIngestionError):
    """Text-generation or vector-store call failed or was unreachable."""
    def __init__(self, message: str, service: str = "unknown", status_code: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class ParseError(NanoporeIngestionError):
    """Model response could not be parsed as JSON."""
    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class ValidationError(NanoporeIngestionError):
    """Extracted field failed a validation rule."""
    def __init__(self, message: str, field_name: str, severity: str = "error"):
        super().__init__(message)
        self.field_name = field_name
        self.severity = severity


class ConfigurationError(NanoporeIngestionError):
    """Invalid configuration or unknown processing template."""
    pass


class JobNotFoundError(NanoporeIngestionError):
    """Requested extraction job does not exist."""
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class InvalidJobTransitionError(NanoporeIngestionError):
    """Job status change not allowed from its current state."""
    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(f"Job {job_id} cannot move from '{current}' to '{requested}'")
        self.job_id = job_id
        self.current = current
        self.requested = requested
