# ============================================================================
# src/nanopore_ingestion/core/context/job.py
# ============================================================================
"""
Extraction job record and its result.

Status only moves forward:

    pending -> processing -> completed | failed

Both end states are terminal. Reprocessing a document creates a new job.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .enums import ConfidenceLevel, ProcessingStatus, ProcessingType
from .extracted_field import ExtractedField
from ..confidence import confidence_level_for
from ...utils.exceptions import InvalidJobTransitionError


_ALLOWED_TRANSITIONS = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    ProcessingStatus.COMPLETED: set(),
    ProcessingStatus.FAILED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class ProcessingResult:
    """Final, caller-visible result of a completed job."""
    extracted_fields: List[ExtractedField] = field(default_factory=list)
    confidence: float = 0.0
    processing_time_ms: float = 0.0
    pages_processed: int = 0
    validation_score: float = 0.0
    suggestions: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    # Advisory signals
    is_scanned: bool = False
    page_attribution: str = "approximate"
    vector_id: Optional[str] = None

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level_for(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extracted_fields": [f.to_dict() for f in self.extracted_fields],
            "confidence": self.confidence,
            "confidence_level": self.confidence_level.value,
            "processing_time_ms": self.processing_time_ms,
            "pages_processed": self.pages_processed,
            "validation_score": self.validation_score,
            "suggestions": list(self.suggestions),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "is_scanned": self.is_scanned,
            "page_attribution": self.page_attribution,
            "vector_id": self.vector_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessingResult":
        return cls(
            extracted_fields=[ExtractedField.from_dict(f) for f in data.get("extracted_fields", [])],
            confidence=data.get("confidence", 0.0),
            processing_time_ms=data.get("processing_time_ms", 0.0),
            pages_processed=data.get("pages_processed", 0),
            validation_score=data.get("validation_score", 0.0),
            suggestions=list(data.get("suggestions", [])),
            warnings=list(data.get("warnings", [])),
            errors=list(data.get("errors", [])),
            is_scanned=data.get("is_scanned", False),
            page_attribution=data.get("page_attribution", "approximate"),
            vector_id=data.get("vector_id"),
        )


@dataclass
class ExtractionJob:
    """
    One submitted document and its processing state.

    The status field is a progress indicator for a synchronous call, not a
    handle to a queued task.
    """
    file_name: str
    file_size: int
    mime_type: str = "application/pdf"
    processing_type: ProcessingType = ProcessingType.PDF_EXTRACTION
    sample_id: Optional[str] = None
    template: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: ProcessingStatus = ProcessingStatus.PENDING
    progress: int = 0
    result: Optional[ProcessingResult] = None
    error: Optional[str] = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        self.processing_type = ProcessingType(self.processing_type)
        self.status = ProcessingStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)

    def transition(self, status: ProcessingStatus, progress: Optional[int] = None) -> None:
        """Move to a new status, rejecting anything the state machine forbids."""
        status = ProcessingStatus(status)
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidJobTransitionError(self.id, self.status.value, status.value)

        now = _utcnow()
        self.status = status
        self.updated_at = now
        if progress is not None:
            self.progress = max(0, min(int(progress), 100))

        if status == ProcessingStatus.PROCESSING:
            self.started_at = now
        elif self.is_terminal:
            self.completed_at = now

    def start(self) -> None:
        self.transition(ProcessingStatus.PROCESSING, progress=0)

    def complete(self, result: ProcessingResult) -> None:
        self.transition(ProcessingStatus.COMPLETED, progress=100)
        self.result = result

    def fail(self, error: str) -> None:
        self.transition(ProcessingStatus.FAILED)
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sample_id": self.sample_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "processing_type": self.processing_type.value,
            "template": self.template,
            "status": self.status.value,
            "progress": self.progress,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionJob":
        result = data.get("result")
        return cls(
            id=data["id"],
            sample_id=data.get("sample_id"),
            file_name=data["file_name"],
            file_size=data.get("file_size", 0),
            mime_type=data.get("mime_type", "application/pdf"),
            processing_type=ProcessingType(data.get("processing_type", ProcessingType.PDF_EXTRACTION.value)),
            template=data.get("template"),
            status=ProcessingStatus(data.get("status", ProcessingStatus.PENDING.value)),
            progress=data.get("progress", 0),
            result=ProcessingResult.from_dict(result) if result else None,
            error=data.get("error"),
            metadata=dict(data.get("metadata") or {}),
            created_at=_parse_dt(data.get("created_at")) or _utcnow(),
            updated_at=_parse_dt(data.get("updated_at")) or _utcnow(),
            started_at=_parse_dt(data.get("started_at")),
            completed_at=_parse_dt(data.get("completed_at")),
        )
