# ============================================================================
# src/nanopore_ingestion/core/template_repository.py
# ============================================================================
"""
Processing Templates

A template bundles, for one document type:
- the field catalog (one regex per field)
- validation rules
- the model extraction prompt
- optional pattern scoring weights

Templates are JSON files in the templates directory, so new form types
need no code changes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging
import re

from .context.enums import ProcessingType
from ..config import BaseSettingsConfig, base_settings
from ..extractors.pattern_extractor import FieldPattern, PatternScoring
from ..utils.exceptions import ConfigurationError
from ..validators.rules import ValidationRule


logger = logging.getLogger(__name__)

_TEMPLATE_NAME = re.compile(r'[A-Za-z0-9_-]+')


@dataclass
class ProcessingTemplate:
    name: str
    description: str = ""
    processing_type: ProcessingType = ProcessingType.PDF_EXTRACTION
    extraction_prompt: Optional[str] = None
    fields: List[FieldPattern] = field(default_factory=list)
    validation_rules: List[ValidationRule] = field(default_factory=list)
    pattern_scoring: PatternScoring = field(default_factory=PatternScoring)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessingTemplate":
        try:
            return cls(
                name=data["name"],
                description=data.get("description", ""),
                processing_type=ProcessingType(
                    data.get("processing_type", ProcessingType.PDF_EXTRACTION.value)
                ),
                extraction_prompt=data.get("extraction_prompt"),
                fields=[FieldPattern.from_dict(f) for f in data.get("fields", [])],
                validation_rules=[
                    ValidationRule.from_dict(r) for r in data.get("validation_rules", [])
                ],
                pattern_scoring=PatternScoring.from_dict(data.get("scoring")),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid template definition: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "processing_type": self.processing_type.value,
            "extraction_prompt": self.extraction_prompt,
            "fields": self.field_names,
            "validation_rules": [r.to_dict() for r in self.validation_rules],
        }


class TemplateRepository:
    """Load processing templates from a directory of JSON files."""

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        settings: Optional[BaseSettingsConfig] = None
    ):
        settings = settings or base_settings
        self.templates_dir = Path(templates_dir or settings.TEMPLATES_DIR)
        self._cache: Dict[str, ProcessingTemplate] = {}

    def get(self, name: str) -> ProcessingTemplate:
        """
        Get a template by name.

        Raises:
            ConfigurationError: unknown template or unreadable file
        """
        if not _TEMPLATE_NAME.fullmatch(name or ""):
            raise ConfigurationError(f"Invalid template name: {name!r}")

        if name in self._cache:
            return self._cache[name]

        template_path = self.templates_dir / f"{name}.json"
        if not template_path.exists():
            raise ConfigurationError(f"Unknown processing template: {name}")

        try:
            with open(template_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read template '{name}': {e}") from e

        template = ProcessingTemplate.from_dict(data)
        self._cache[name] = template
        logger.debug(
            f"Loaded template {name}: {len(template.fields)} fields, "
            f"{len(template.validation_rules)} rules"
        )
        return template

    def list(self) -> List[str]:
        if not self.templates_dir.exists():
            return []
        return sorted(p.stem for p in self.templates_dir.glob("*.json"))

    def get_rules(self, name: str) -> List[ValidationRule]:
        return list(self.get(name).validation_rules)

    def get_field_catalog(self, name: str) -> List[str]:
        return self.get(name).field_names
