# ============================================================================
# src/nanopore_ingestion/extractors/llm_extractor.py
# ============================================================================
"""
Language-Model Field Extractor

Asks the text-generation endpoint for the fields that pattern matching
could not find.

Flow:
    1. Build prompt listing the target fields and the document text
    2. Generate at low temperature with a bounded token budget
    3. Parse the JSON object in the reply
    4. On ParseError, fall back to "key: value" lines

Transport failures surface as ExternalServiceError and are not retried.
"""

from typing import Any, Dict, List, Optional
import json
import re

from .base import FieldExtractor
from ..config import OllamaSettings, ollama_settings
from ..core.confidence import clamp_confidence
from ..core.context.enums import FieldSource
from ..core.context.extracted_field import ExtractedField
from ..llm.base import BaseLLMClient
from ..llm.prompts import build_extraction_prompt
from ..utils.exceptions import ParseError


_IDENTIFIER_VALUE = re.compile(r'^[A-Z0-9-]+$')
_NULL_VALUES = {"", "null", "none", "undefined", "n/a"}


class LanguageModelFieldExtractor(FieldExtractor):
    """
    Model-backed extractor.

    Args:
        client: Text-generation client
        default_fields: Field catalog used when no target list is given
        settings: Sampling settings (temperature, token budget)
    """

    name = "language_model"

    def __init__(
        self,
        client: BaseLLMClient,
        default_fields: Optional[List[str]] = None,
        settings: Optional[OllamaSettings] = None
    ):
        super().__init__()
        self.client = client
        self.default_fields = list(default_fields or [])
        settings = settings or ollama_settings
        self.temperature = settings.EXTRACTION_TEMPERATURE
        self.max_tokens = settings.EXTRACTION_MAX_TOKENS

    async def extract(
        self,
        text: str,
        target_fields: Optional[List[str]] = None,
        instruction: Optional[str] = None
    ) -> List[ExtractedField]:
        """
        Extract fields with the language model.

        Args:
            text: Document text
            target_fields: Fields to ask for (defaults to the full catalog)
            instruction: Caller-supplied extraction instruction

        Raises:
            ExternalServiceError: generation call failed
        """
        fields = list(target_fields) if target_fields is not None else self.default_fields
        prompt = build_extraction_prompt(text, fields, instruction)

        response = await self.client.generate(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        return self.parse_response(response.get("text", ""))

    def parse_response(self, response_text: str) -> List[ExtractedField]:
        try:
            data = self.client.extract_json(response_text)
        except ParseError as e:
            self.logger.warning(f"Model reply was not JSON, using line parsing: {e}")
            data = self._parse_lines(response_text)

        results = []
        for key, raw_value in data.items():
            value = self._stringify(raw_value)
            if value is None:
                continue
            field_name = str(key).strip()
            results.append(ExtractedField(
                field_name=field_name,
                value=value,
                confidence=self.score(field_name, value),
                source=FieldSource.LANGUAGE_MODEL,
            ))

        self.logger.debug(f"Model extraction produced {len(results)} fields")
        return results

    @staticmethod
    def _parse_lines(response_text: str) -> Dict[str, str]:
        data: Dict[str, str] = {}
        for line in response_text.split('\n'):
            if ':' not in line:
                continue
            key, value = line.split(':', 1)
            key = re.sub(r'\s+', '_', key.strip().lower())
            value = value.strip()
            if key and value.lower() not in _NULL_VALUES:
                data.setdefault(key, value)
        return data

    @staticmethod
    def _stringify(raw_value: Any) -> Optional[str]:
        if raw_value is None:
            return None
        if isinstance(raw_value, (dict, list)):
            value = json.dumps(raw_value)
        else:
            value = str(raw_value).strip()
        if value.lower() in _NULL_VALUES:
            return None
        return value

    @staticmethod
    def score(field_name: str, value: str) -> float:
        """
        Confidence for a model-extracted value.

        Field-name hints are matched on underscore-separated tokens,
        so "submitter_email" implies an email and "project_id" an id.
        """
        tokens = set(field_name.lower().split('_'))
        confidence = 0.5

        if len(value) > 2:
            confidence += 0.2
        if 'email' in tokens and '@' in value:
            confidence += 0.3
        if 'name' in tokens and len(value) > 2:
            confidence += 0.2
        if 'id' in tokens and _IDENTIFIER_VALUE.match(value):
            confidence += 0.3

        return clamp_confidence(confidence)
