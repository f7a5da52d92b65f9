# ============================================================================
# src/nanopore_ingestion/llm/base.py
# ============================================================================
"""
Base Text-Generation Client Interface

Defines the abstract interface that the pipeline depends on. The concrete
backend talks to an Ollama server; tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import json
import logging
import re

from json_repair import repair_json

from ..utils.exceptions import ParseError


_JSON_OBJECT = re.compile(r'\{[\s\S]*\}')


class BaseLLMClient(ABC):
    """
    Abstract base class for text-generation clients.

    All backends must implement:
    - generate(): Async text generation
    - embed(): Async embedding-mode invocation
    - health_check(): Verify backend is available
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        self._inference_count = 0
        self._embedding_count = 0
        self._total_inference_time = 0.0

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the generation model identifier."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        """
        Generate response from prompt.

        Returns:
            {
                "text": str,              # Generated text
                "model": str,             # Model identifier
                "prompt_tokens": int,
                "generated_tokens": int,
                "inference_time": float   # Seconds
            }

        Raises:
            ExternalServiceError: transport failure, timeout or non-200 reply
        """
        pass

    @abstractmethod
    async def embed(self, text: str, model: Optional[str] = None) -> List[float]:
        """
        Embed text into a fixed-length vector.

        Raises:
            ExternalServiceError: transport failure, timeout or empty vector
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the backend is available.

        Returns:
            {"healthy": bool, "model": str, "details": str}
        """
        pass

    async def close(self) -> None:
        """Release network resources (no-op by default)."""
        return None

    def extract_json(self, response_text: str) -> Dict[str, Any]:
        """
        Extract the JSON object embedded in generated text.

        Models often wrap JSON in prose like:
        "Here are the fields: {"sample_name": "S-1"}"

        Uses json_repair for near-miss JSON (single quotes, trailing commas).

        Raises:
            ParseError: no JSON object could be recovered
        """
        if not response_text or not response_text.strip():
            raise ParseError("Empty response text", raw_text=response_text or "")

        match = _JSON_OBJECT.search(response_text)
        if not match:
            raise ParseError("No JSON object found in response", raw_text=response_text)

        candidate = match.group(0)
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            try:
                data = repair_json(candidate, return_objects=True)
            except Exception as e:
                raise ParseError(f"JSON repair failed: {e}", raw_text=response_text) from e
            if isinstance(data, dict) and data:
                self.logger.debug("json_repair fixed extracted JSON block")

        if not isinstance(data, dict) or (not data and candidate.strip() != "{}"):
            raise ParseError("Response JSON is not an object", raw_text=response_text)

        return data

    def get_statistics(self) -> Dict[str, Any]:
        avg_time = (
            self._total_inference_time / self._inference_count
            if self._inference_count > 0
            else 0.0
        )
        return {
            "model": self.model_name,
            "inference_count": self._inference_count,
            "embedding_count": self._embedding_count,
            "total_inference_time": self._total_inference_time,
            "average_inference_time": avg_time,
        }
