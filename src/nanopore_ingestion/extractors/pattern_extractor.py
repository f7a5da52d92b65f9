# ============================================================================
# src/nanopore_ingestion/extractors/pattern_extractor.py
# ============================================================================
"""
Pattern Field Extractor

Deterministic extraction of form fields using one named regular
expression per field. The catalog comes from the processing template.

Confidence is an explainable heuristic, not a learned score:

    0.5  base
  + 0.2  value longer than 3 characters
  + 0.3  field pattern is an email pattern
  + 0.2  value is purely numeric
  + 0.3  value is a short code (uppercase letters, hyphen, digits)

capped at 1.0. Weights can be overridden per template.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import re

from .base import FieldExtractor
from ..config import ThresholdSettings, threshold_settings
from ..core.confidence import clamp_confidence
from ..core.context.enums import FieldSource
from ..core.context.extracted_field import ExtractedField
from ..utils.exceptions import ConfigurationError


_NUMERIC_VALUE = re.compile(r'^\d+(\.\d+)?$')
_CODE_VALUE = re.compile(r'^[A-Z]+-[0-9]+$')

_FLAG_NAMES = {
    "IGNORECASE": re.IGNORECASE,
    "MULTILINE": re.MULTILINE,
    "DOTALL": re.DOTALL,
}


@dataclass
class FieldPattern:
    """One catalog entry: a field name and the regex that finds it."""
    name: str
    pattern: str
    flags: int = re.IGNORECASE
    description: str = ""

    def __post_init__(self):
        try:
            self.regex = re.compile(self.pattern, self.flags)
        except re.error as e:
            raise ConfigurationError(f"Invalid pattern for field '{self.name}': {e}")

    @property
    def is_email_pattern(self) -> bool:
        return '@' in self.pattern

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldPattern":
        flags = 0
        for flag in data.get("flags", ["IGNORECASE"]):
            if flag not in _FLAG_NAMES:
                raise ConfigurationError(f"Unknown regex flag '{flag}' for field '{data.get('name')}'")
            flags |= _FLAG_NAMES[flag]
        return cls(
            name=data["name"],
            pattern=data["pattern"],
            flags=flags,
            description=data.get("description", ""),
        )


@dataclass
class PatternScoring:
    base: float = 0.5
    length_bonus: float = 0.2
    min_length: int = 3
    email_bonus: float = 0.3
    numeric_bonus: float = 0.2
    code_bonus: float = 0.3

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PatternScoring":
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


class PatternFieldExtractor(FieldExtractor):
    """
    Regex-based extractor over a fixed field catalog.

    Usage:
        extractor = PatternFieldExtractor(template.fields, template.pattern_scoring)
        fields = extractor.extract_nanopore_form_fields(text)
    """

    name = "pattern"

    def __init__(
        self,
        catalog: List[FieldPattern],
        scoring: Optional[PatternScoring] = None,
        settings: Optional[ThresholdSettings] = None
    ):
        super().__init__()
        self.catalog = list(catalog)
        self.scoring = scoring or PatternScoring()
        self.lines_per_page = (settings or threshold_settings).LINES_PER_PAGE

    @property
    def field_names(self) -> List[str]:
        return [entry.name for entry in self.catalog]

    async def extract(
        self,
        text: str,
        target_fields: Optional[List[str]] = None
    ) -> List[ExtractedField]:
        return self.extract_fields(text, target_fields)

    def extract_nanopore_form_fields(self, text: str) -> List[ExtractedField]:
        """Run the whole catalog over the text."""
        return self.extract_fields(text)

    def extract_fields(
        self,
        text: str,
        target_fields: Optional[List[str]] = None
    ) -> List[ExtractedField]:
        wanted = set(target_fields) if target_fields is not None else None
        lines = text.split('\n')
        results = []

        for entry in self.catalog:
            if wanted is not None and entry.name not in wanted:
                continue

            match = entry.regex.search(text)
            if not match:
                continue

            value = (match.group(1) if match.groups() else match.group(0)) or ""
            value = value.strip()
            if not value:
                continue

            results.append(ExtractedField(
                field_name=entry.name,
                value=value,
                confidence=self.score(entry, value),
                source=FieldSource.PATTERN,
                page_number=self.estimate_page(lines, value),
            ))

        self.logger.debug(f"Pattern extraction found {len(results)}/{len(self.catalog)} fields")
        return results

    def score(self, entry: FieldPattern, value: str) -> float:
        weights = self.scoring
        confidence = weights.base

        if len(value) > weights.min_length:
            confidence += weights.length_bonus
        if entry.is_email_pattern:
            confidence += weights.email_bonus
        if _NUMERIC_VALUE.match(value):
            confidence += weights.numeric_bonus
        if _CODE_VALUE.match(value):
            confidence += weights.code_bonus

        return clamp_confidence(confidence)

    def estimate_page(self, lines: List[str], value: str) -> Optional[int]:
        """Approximate page of the first line containing the value."""
        for index, line in enumerate(lines):
            if value in line:
                return index // self.lines_per_page + 1
        return None
