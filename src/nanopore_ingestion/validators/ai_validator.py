# ============================================================================
# src/nanopore_ingestion/validators/ai_validator.py
# ============================================================================
"""
Language-Model Validator

Asks the generation model to review a whole form against its rules.
Catches problems the rules cannot express (inconsistent amounts, names in
the wrong field).

Slower than rule validation and advisory only.
"""

from typing import Any, Dict, List, Optional
import logging

from .rules import ValidationResult, ValidationRule
from ..config import OllamaSettings, ollama_settings
from ..core.confidence import clamp_confidence
from ..llm.base import BaseLLMClient
from ..llm.prompts import build_validation_prompt
from ..utils.exceptions import ParseError, ValidationError


logger = logging.getLogger(__name__)

FORM_FIELD = "form"
REVIEW_SUGGESTION = "Review extracted data for accuracy"


class LanguageModelValidator:

    def __init__(
        self,
        client: BaseLLMClient,
        settings: Optional[OllamaSettings] = None
    ):
        self.client = client
        settings = settings or ollama_settings
        self.temperature = settings.VALIDATION_TEMPERATURE
        self.max_tokens = settings.VALIDATION_MAX_TOKENS

    async def validate(
        self,
        fields: Dict[str, Any],
        rules: List[ValidationRule]
    ) -> ValidationResult:
        """
        Validate form data with the model.

        Raises:
            ExternalServiceError: generation call failed
        """
        prompt = build_validation_prompt(fields, [r.to_dict() for r in rules])
        response = await self.client.generate(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return self._parse_response(response.get("text", ""))

    def _parse_response(self, text: str) -> ValidationResult:
        try:
            data = self.client.extract_json(text)
        except ParseError:
            logger.warning("Validation reply was not JSON, using keyword fallback")
            return self._fallback(text)

        errors = [
            ValidationError(str(message), field_name=FORM_FIELD)
            for message in (data.get("errors") or [])
        ]
        suggestions = [str(s) for s in (data.get("suggestions") or [])]
        is_valid = bool(data.get("isValid", not errors))

        try:
            confidence = float(data.get("confidence", 0.5))
        except (TypeError, ValueError):
            confidence = 0.5

        return ValidationResult(
            is_valid=is_valid,
            score=clamp_confidence(confidence),
            errors=errors,
            suggestions=suggestions,
        )

    @staticmethod
    def _fallback(text: str) -> ValidationResult:
        lowered = text.lower()
        is_valid = "invalid" not in lowered and "error" not in lowered

        result = ValidationResult(is_valid=is_valid, score=0.7 if is_valid else 0.3)
        if not is_valid:
            result.errors.append(ValidationError(
                "Model flagged the form as invalid", field_name=FORM_FIELD
            ))
        if "suggestion" in lowered:
            result.suggestions.append(REVIEW_SUGGESTION)
        return result
