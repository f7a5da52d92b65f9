# ============================================================================
# src/nanopore_ingestion/extractors/pdf_extractor.py
# ============================================================================
"""
PDF Text Extraction

Turns an uploaded PDF binary into plain text for field extraction.

Extraction cascade (in order of preference):
1. pypdfium2: Fast, good Unicode support, best for modern PDFs
2. pypdf: Fallback, widely compatible

No OCR is performed. Documents that look scanned are only flagged
(is_scanned) so callers know extraction quality will be poor.

Page segmentation is approximate: lines are split evenly across the
reported page count, not mapped from the real page layout.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import io
import logging
import math
import re

import pypdfium2
from pypdf import PdfReader

from ..config import ThresholdSettings, threshold_settings
from ..utils.exceptions import ExtractionError


_SCAN_KEYWORDS = re.compile(r'\b(scan|scanned|ocr)\b', re.IGNORECASE)
_NON_ASCII = re.compile(r'[^\x00-\x7F]')


@dataclass
class DocumentText:
    """Text pulled out of one PDF."""
    text: str
    page_count: int
    raw_metadata: Dict[str, Any] = field(default_factory=dict)
    is_scanned: bool = False
    method: str = "unknown"
    warnings: List[str] = field(default_factory=list)


@dataclass
class PageSegment:
    page_number: int
    text: str
    word_count: int


class DocumentTextExtractor:
    """
    Extract text, page count and metadata from PDF bytes.

    Raises ExtractionError when neither backend can parse the binary.
    """

    def __init__(self, settings: Optional[ThresholdSettings] = None):
        self.settings = settings or threshold_settings
        self.logger = logging.getLogger(__name__)

    def extract(self, data: bytes) -> DocumentText:
        """
        Extract text from a PDF binary.

        Args:
            data: Raw PDF bytes

        Returns:
            DocumentText with text, page count, raw metadata and scan flag
        """
        if not data:
            raise ExtractionError("Empty document")

        warnings: List[str] = []

        try:
            text, page_count = self._extract_with_pypdfium2(data)
            method = "pypdfium2"
        except Exception as e:
            self.logger.warning(f"pypdfium2 failed, trying pypdf: {e}")
            warnings.append(f"pypdfium2 failed: {e}")
            try:
                text, page_count = self._extract_with_pypdf(data)
                method = "pypdf"
            except Exception as e2:
                self.logger.error(f"pypdf also failed: {e2}")
                raise ExtractionError(
                    f"Failed to extract text from PDF. pypdfium2: {e}, pypdf: {e2}"
                ) from e2

        text = self._normalize(text)
        raw_metadata = self._read_metadata(data)
        is_scanned = self.is_scanned(text)

        self.logger.debug(
            f"{method} extracted {len(text)} chars from {page_count} pages "
            f"(scanned={is_scanned})"
        )

        return DocumentText(
            text=text,
            page_count=page_count,
            raw_metadata=raw_metadata,
            is_scanned=is_scanned,
            method=method,
            warnings=warnings,
        )

    def _extract_with_pypdfium2(self, data: bytes) -> Tuple[str, int]:
        pdf = pypdfium2.PdfDocument(data)
        try:
            all_text = []
            for page_num in range(len(pdf)):
                page = pdf[page_num]
                textpage = page.get_textpage()
                text = textpage.get_text_range() or ""
                all_text.append(text.strip())
                textpage.close()
                page.close()
            return "\n".join(all_text), len(pdf)
        finally:
            pdf.close()

    def _extract_with_pypdf(self, data: bytes) -> Tuple[str, int]:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            # Try empty password
            reader.decrypt("")

        all_text = []
        for page in reader.pages:
            all_text.append((page.extract_text() or "").strip())
        return "\n".join(all_text), len(reader.pages)

    def _read_metadata(self, data: bytes) -> Dict[str, Any]:
        """Document info dictionary; empty when it cannot be read."""
        try:
            info = PdfReader(io.BytesIO(data)).metadata
        except Exception as e:
            self.logger.debug(f"Could not read PDF metadata: {e}")
            return {}
        if not info:
            return {}
        return {str(key).lstrip('/'): str(value) for key, value in info.items()}

    @staticmethod
    def _normalize(text: str) -> str:
        return text.replace('\r\n', '\n').replace('\r', '\n').strip()

    def is_scanned(self, text: str) -> bool:
        """
        Heuristic: does this text look like it came from a scanned page?

        Any one of these flags the document:
        - very short text
        - non-ASCII characters (OCR noise, encoding artifacts)
        - mentions of scanning / OCR
        - fewer than a handful of lines
        """
        return (
            len(text) < self.settings.SCANNED_TEXT_MIN_LENGTH
            or bool(_NON_ASCII.search(text))
            or bool(_SCAN_KEYWORDS.search(text))
            or len(text.split('\n')) < self.settings.SCANNED_MIN_LINES
        )

    @staticmethod
    def segment_pages(text: str, page_count: int) -> List[PageSegment]:
        """
        Split text evenly across pages by line count.

        This is an approximation: real page boundaries are not known once
        the text has been joined.
        """
        lines = text.split('\n')
        page_count = max(page_count, 1)
        lines_per_page = max(math.ceil(len(lines) / page_count), 1)

        segments = []
        for index in range(page_count):
            chunk = lines[index * lines_per_page:(index + 1) * lines_per_page]
            page_text = '\n'.join(chunk)
            segments.append(PageSegment(
                page_number=index + 1,
                text=page_text,
                word_count=len(page_text.split()),
            ))
        return segments

    def get_metadata(self, data: bytes) -> Dict[str, Any]:
        """Summary metadata for a PDF without running field extraction."""
        document = self.extract(data)
        producer = document.raw_metadata.get('Producer', '')
        return {
            "pages": document.page_count,
            "info": document.raw_metadata,
            "text_length": len(document.text),
            "word_count": len(document.text.split()),
            "has_images": "Image" in producer,
            "is_scanned": document.is_scanned,
        }
