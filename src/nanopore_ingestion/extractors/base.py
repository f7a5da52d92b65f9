# ============================================================================
# src/nanopore_ingestion/extractors/base.py
# ============================================================================
"""
Field extractor strategy interface.

Each strategy turns document text into ExtractedField candidates with its
own confidence scoring. Fusion only ever sees the candidates, so new
strategies (table-aware, OCR-based) plug in without touching it.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..core.context.extracted_field import ExtractedField


class FieldExtractor(ABC):
    """Base class for field extraction strategies."""

    name: str = "base"

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def extract(
        self,
        text: str,
        target_fields: Optional[List[str]] = None
    ) -> List[ExtractedField]:
        """
        Extract field candidates from text.

        Args:
            text: Full document text
            target_fields: Restrict extraction to these field names

        Returns:
            At most one candidate per field name
        """
        pass
