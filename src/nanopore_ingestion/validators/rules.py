# ============================================================================
# src/nanopore_ingestion/validators/rules.py
# ============================================================================
"""
Validation rule and result types.

Rules belong to a processing template and are loaded from its JSON file.
"""

from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, Dict, List, Optional

from ..utils.exceptions import ConfigurationError, ValidationError


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    EMAIL = "email"


@dataclass
class ValidationRule:
    field_name: str
    required: bool = False
    type: FieldType = FieldType.STRING
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    exclusive_min: bool = False
    allowed_values: Optional[List[str]] = None
    pattern: Optional[str] = None

    def __post_init__(self):
        try:
            self.type = FieldType(self.type)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported rule type '{self.type}' for field '{self.field_name}'"
            )
        try:
            self.regex = re.compile(self.pattern) if self.pattern else None
        except re.error as e:
            raise ConfigurationError(f"Invalid pattern for field '{self.field_name}': {e}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationRule":
        allowed = data.get("allowed_values")
        return cls(
            field_name=data["field_name"],
            required=bool(data.get("required", False)),
            type=data.get("type", FieldType.STRING.value),
            min_length=data.get("min_length"),
            max_length=data.get("max_length"),
            min_value=data.get("min_value"),
            max_value=data.get("max_value"),
            exclusive_min=bool(data.get("exclusive_min", False)),
            allowed_values=list(allowed) if allowed is not None else None,
            pattern=data.get("pattern"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_name": self.field_name,
            "required": self.required,
            "type": self.type.value,
            "min_length": self.min_length,
            "max_length": self.max_length,
            "min_value": self.min_value,
            "max_value": self.max_value,
            "exclusive_min": self.exclusive_min,
            "allowed_values": self.allowed_values,
            "pattern": self.pattern,
        }


@dataclass
class ValidationResult:
    """Outcome of applying a rule set to one job's fused fields."""
    is_valid: bool = True
    score: float = 0.0
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationError] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def error_messages(self) -> List[str]:
        return [str(e) for e in self.errors]

    @property
    def warning_messages(self) -> List[str]:
        return [str(w) for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "errors": [
                {"field_name": e.field_name, "error": str(e), "severity": e.severity}
                for e in self.errors
            ],
            "warnings": self.warning_messages,
            "suggestions": list(self.suggestions),
        }
