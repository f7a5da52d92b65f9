"""
Document text and field extraction.
"""

from .base import FieldExtractor
from .pdf_extractor import DocumentText, DocumentTextExtractor, PageSegment
from .pattern_extractor import FieldPattern, PatternFieldExtractor, PatternScoring
from .llm_extractor import LanguageModelFieldExtractor

__all__ = [
    "FieldExtractor",
    "DocumentText",
    "DocumentTextExtractor",
    "PageSegment",
    "FieldPattern",
    "PatternFieldExtractor",
    "PatternScoring",
    "LanguageModelFieldExtractor",
]
