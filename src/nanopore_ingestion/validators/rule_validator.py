# ============================================================================
# src/nanopore_ingestion/validators/rule_validator.py
# ============================================================================
"""
Rule-Based Validator

Fast, deterministic validation of fused form fields against the rules of
the document's template:

1. Required fields present and non-empty
2. Email format
3. Numeric parsing and min/max bounds
4. String length bounds (warnings only)
5. Allowed value sets
6. Regex patterns

Validation never fails a job. Errors lower the validation score and are
reported back alongside the extracted fields.
"""

import logging
import math
import re
from typing import Dict, List, Optional, Tuple

from .rules import FieldType, ValidationResult, ValidationRule
from ..core.context.extracted_field import ExtractedField
from ..utils.exceptions import ValidationError


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

REVIEW_SUGGESTION = "Consider reviewing the extracted data for accuracy"


class RuleValidator:
    """
    Apply a template's validation rules to one job's fused fields.

    Score = rules whose field is present and error-free / rules evaluated.
    """

    def __init__(self, suggestion_threshold: float = 0.8):
        self.suggestion_threshold = suggestion_threshold

    def validate(
        self,
        fields: List[ExtractedField],
        rules: List[ValidationRule]
    ) -> ValidationResult:
        """
        Validate fused fields.

        Args:
            fields: Fused fields for one job (one per field name)
            rules: Rules of the job's template

        Returns:
            ValidationResult with errors, warnings and suggestions
        """
        by_name: Dict[str, ExtractedField] = {f.field_name: f for f in fields}
        result = ValidationResult()
        satisfied = 0

        for rule in rules:
            extracted = by_name.get(rule.field_name)
            value = extracted.value.strip() if extracted and extracted.value else ""

            if not value:
                if rule.required:
                    result.errors.append(ValidationError(
                        f"Required field '{rule.field_name}' is missing",
                        field_name=rule.field_name
                    ))
                continue

            errors, warnings = self.check_rule(rule, value)
            result.errors.extend(errors)
            result.warnings.extend(warnings)

            for error in errors:
                extracted.validation_errors.append(str(error))

            if not errors:
                satisfied += 1

        result.score = satisfied / len(rules) if rules else 0.0
        result.is_valid = len(result.errors) == 0

        if result.score < self.suggestion_threshold:
            result.suggestions.append(REVIEW_SUGGESTION)

        logger.debug(
            f"Validated {len(rules)} rules: score={result.score:.2f}, "
            f"errors={len(result.errors)}, warnings={len(result.warnings)}"
        )

        return result

    def check_rule(
        self,
        rule: ValidationRule,
        value: str
    ) -> Tuple[List[ValidationError], List[ValidationError]]:
        """
        Check one present value against one rule.

        Returns:
            (errors, warnings)
        """
        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []
        name = rule.field_name

        if rule.type == FieldType.EMAIL:
            if not EMAIL_PATTERN.match(value):
                errors.append(ValidationError(
                    f"Invalid email format for '{name}': {value}", field_name=name
                ))

        elif rule.type == FieldType.NUMBER:
            number = self._parse_number(value)
            if number is None:
                errors.append(ValidationError(
                    f"Invalid number format for '{name}': {value}", field_name=name
                ))
            else:
                if rule.min_value is not None and rule.exclusive_min and number <= rule.min_value:
                    errors.append(ValidationError(
                        f"Value for '{name}' must be greater than {rule.min_value}: {number}",
                        field_name=name
                    ))
                elif rule.min_value is not None and number < rule.min_value:
                    errors.append(ValidationError(
                        f"Value for '{name}' is below minimum: {number} < {rule.min_value}",
                        field_name=name
                    ))
                if rule.max_value is not None and number > rule.max_value:
                    errors.append(ValidationError(
                        f"Value for '{name}' is above maximum: {number} > {rule.max_value}",
                        field_name=name
                    ))

        elif rule.type == FieldType.STRING:
            if rule.min_length is not None and len(value) < rule.min_length:
                warnings.append(ValidationError(
                    f"Field '{name}' is shorter than recommended: {len(value)} < {rule.min_length}",
                    field_name=name, severity="warning"
                ))
            if rule.max_length is not None and len(value) > rule.max_length:
                warnings.append(ValidationError(
                    f"Field '{name}' is longer than recommended: {len(value)} > {rule.max_length}",
                    field_name=name, severity="warning"
                ))

        if rule.allowed_values:
            allowed = {v.casefold() for v in rule.allowed_values}
            if value.casefold() not in allowed:
                errors.append(ValidationError(
                    f"Invalid value for '{name}': {value}. "
                    f"Allowed values: {', '.join(rule.allowed_values)}",
                    field_name=name
                ))

        if rule.regex is not None and not rule.regex.search(value):
            errors.append(ValidationError(
                f"Field '{name}' does not match required pattern: {value}",
                field_name=name
            ))

        return errors, warnings

    @staticmethod
    def _parse_number(value: str) -> Optional[float]:
        try:
            number = float(value)
        except ValueError:
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number
