"""
Text-generation clients and prompts.
"""

from .base import BaseLLMClient
from .ollama_client import OllamaClient
from .prompts import (
    DEFAULT_EXTRACTION_INSTRUCTION,
    build_extraction_prompt,
    build_answer_prompt,
    build_validation_prompt,
)

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "DEFAULT_EXTRACTION_INSTRUCTION",
    "build_extraction_prompt",
    "build_answer_prompt",
    "build_validation_prompt",
]
