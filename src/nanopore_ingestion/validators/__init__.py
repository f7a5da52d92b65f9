"""
Field validation: deterministic rules and model review.
"""

from .rules import FieldType, ValidationRule, ValidationResult
from .rule_validator import RuleValidator
from .ai_validator import LanguageModelValidator

__all__ = [
    "FieldType",
    "ValidationRule",
    "ValidationResult",
    "RuleValidator",
    "LanguageModelValidator",
]
