# ============================================================================
# src/nanopore_ingestion/core/context/extracted_field.py
# ============================================================================
"""
Single extracted form field
- Value as found in the document
- Confidence and derived level
- Provenance (extraction strategy, approximate page)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import ConfidenceLevel, FieldSource
from ..confidence import clamp_confidence, confidence_level_for


@dataclass
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass
class ExtractedField:
    field_name: str
    value: str
    confidence: float = 0.0
    source: FieldSource = FieldSource.PATTERN

    # Provenance; page numbers are estimated from line position, not layout
    page_number: Optional[int] = None
    bounding_box: Optional[BoundingBox] = None

    validation_errors: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.confidence = clamp_confidence(self.confidence)
        self.source = FieldSource(self.source)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level_for(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "field_name": self.field_name,
            "value": self.value,
            "confidence": self.confidence,
            "confidence_level": self.confidence_level.value,
            "source": self.source.value,
            "page_number": self.page_number,
            "bounding_box": None,
            "validation_errors": list(self.validation_errors),
        }
        if self.bounding_box is not None:
            data["bounding_box"] = {
                "x": self.bounding_box.x,
                "y": self.bounding_box.y,
                "width": self.bounding_box.width,
                "height": self.bounding_box.height,
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedField":
        bbox = data.get("bounding_box")
        return cls(
            field_name=data["field_name"],
            value=str(data["value"]),
            confidence=float(data.get("confidence", 0.0)),
            source=FieldSource(data.get("source", FieldSource.PATTERN.value)),
            page_number=data.get("page_number"),
            bounding_box=BoundingBox(**bbox) if bbox else None,
            validation_errors=list(data.get("validation_errors") or []),
        )
