# ============================================================================
# src/nanopore_ingestion/core/fusion.py
# ============================================================================
"""
Field Fusion

Merges candidates from the extraction strategies into one field per name.

Precedence rule: pattern fields seed the result; a model field replaces an
existing entry only when its confidence is strictly greater. Ties keep the
pattern value.
"""

from dataclasses import dataclass, field
from typing import Dict, List
import logging

from .confidence import confidence_level_for, mean_confidence
from .context.enums import ConfidenceLevel
from .context.extracted_field import ExtractedField


logger = logging.getLogger(__name__)


@dataclass
class FusionResult:
    fields: List[ExtractedField] = field(default_factory=list)
    confidence: float = 0.0
    replaced: List[str] = field(default_factory=list)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level_for(self.confidence)


class FieldFusionEngine:
    """Deterministic merge of pattern and model field candidates."""

    def fuse(
        self,
        pattern_fields: List[ExtractedField],
        model_fields: List[ExtractedField]
    ) -> FusionResult:
        merged: Dict[str, ExtractedField] = {}
        replaced: List[str] = []

        for candidate in pattern_fields:
            if candidate.field_name not in merged:
                merged[candidate.field_name] = candidate

        for candidate in model_fields:
            existing = merged.get(candidate.field_name)
            if existing is None:
                merged[candidate.field_name] = candidate
            elif candidate.confidence > existing.confidence:
                logger.debug(
                    f"Model value for '{candidate.field_name}' replaces {existing.source.value} "
                    f"value ({candidate.confidence:.2f} > {existing.confidence:.2f})"
                )
                merged[candidate.field_name] = candidate
                replaced.append(candidate.field_name)

        fields = list(merged.values())
        return FusionResult(
            fields=fields,
            confidence=mean_confidence(f.confidence for f in fields),
            replaced=replaced,
        )
