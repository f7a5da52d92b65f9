# ============================================================================
# src/nanopore_ingestion/llm/ollama_client.py
# ============================================================================
"""
Ollama Client

Talks to an Ollama server over its HTTP API:
- /api/generate     text generation (extraction, validation, answers)
- /api/embeddings   embedding mode (document and query vectors)
- /api/tags         health check / model listing

Every request carries a fixed timeout. Failures are surfaced as
ExternalServiceError; nothing is retried.

Setup:
    1. Install Ollama: https://ollama.ai
    2. Pull models: ollama pull llama2 && ollama pull nomic-embed-text
    3. Start server: ollama serve
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp
import numpy as np

from .base import BaseLLMClient
from ..config import OllamaSettings, ollama_settings
from ..utils.exceptions import ExternalServiceError


class OllamaClient(BaseLLMClient):
    """
    Ollama-based generation and embedding client.

    Config options (override settings):
        ollama_host: Ollama server URL
        ollama_model: Generation model name
        embedding_model: Embedding model name
        timeout: Request timeout in seconds
        max_tokens: Default max tokens
        temperature: Default temperature
    """

    SERVICE = "ollama"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        settings: Optional[OllamaSettings] = None
    ):
        super().__init__(config)
        settings = settings or ollama_settings

        self.host = self.config.get('ollama_host', settings.OLLAMA_HOST).rstrip('/')
        self._model_name = self.config.get('ollama_model', settings.OLLAMA_MODEL)
        self.embedding_model = self.config.get('embedding_model', settings.OLLAMA_EMBEDDING_MODEL)

        self.default_max_tokens = self.config.get('max_tokens', settings.EXTRACTION_MAX_TOKENS)
        self.default_temperature = self.config.get('temperature', settings.EXTRACTION_TEMPERATURE)
        self.timeout = self.config.get('timeout', settings.OLLAMA_TIMEOUT)

        # HTTP session (created lazily, tied to event loop)
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

        self.logger.info(f"Initialized Ollama client: {self.host} / {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for current event loop."""
        current_loop = asyncio.get_running_loop()

        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed:
                await self._session.close()

            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._session_loop = current_loop

        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.host}{path}"
        try:
            session = await self._get_session()
            async with session.post(url, json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise ExternalServiceError(
                        f"Ollama error ({response.status}): {error_text}",
                        service=self.SERVICE,
                        status_code=response.status
                    )
                return await response.json()

        except asyncio.TimeoutError as e:
            self.logger.error(f"Ollama request to {path} timed out after {self.timeout}s")
            raise ExternalServiceError(
                f"Ollama request timed out after {self.timeout}s",
                service=self.SERVICE
            ) from e
        except aiohttp.ClientError as e:
            self.logger.error(f"Ollama request to {path} failed: {e}")
            raise ExternalServiceError(
                f"Cannot reach Ollama at {self.host}: {e}",
                service=self.SERVICE
            ) from e

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        """
        Generate response using Ollama.

        Args:
            prompt: Input prompt
            model: Model override (defaults to the configured generation model)
            temperature: Sampling temperature
            max_tokens: Max tokens to generate
            json_mode: Constrain output to valid JSON using Ollama's format option

        Returns:
            Response dict with text, tokens, timing info
        """
        start_time = datetime.now()
        model = model or self._model_name
        max_tokens = max_tokens or self.default_max_tokens
        temperature = temperature if temperature is not None else self.default_temperature

        payload: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            }
        }
        if json_mode:
            payload["format"] = "json"

        data = await self._post("/api/generate", payload)

        inference_time = (datetime.now() - start_time).total_seconds()
        generated_tokens = data.get('eval_count', 0)

        self._inference_count += 1
        self._total_inference_time += inference_time

        self.logger.info(
            f"Generated {generated_tokens} tokens with {model} in {inference_time:.2f}s"
        )

        return {
            "text": (data.get('response') or '').strip(),
            "model": model,
            "prompt_tokens": data.get('prompt_eval_count', 0),
            "generated_tokens": generated_tokens,
            "inference_time": inference_time,
        }

    async def embed(self, text: str, model: Optional[str] = None) -> List[float]:
        """Get embedding vector from Ollama."""
        model = model or self.embedding_model
        data = await self._post("/api/embeddings", {"model": model, "prompt": text})

        vector = np.asarray(data.get('embedding') or [], dtype=np.float32)
        if vector.ndim != 1 or vector.size == 0:
            raise ExternalServiceError(
                f"Ollama returned no embedding for model {model}",
                service=self.SERVICE
            )

        self._embedding_count += 1
        return vector.tolist()

    async def list_models(self) -> List[str]:
        """Names of models available on the server."""
        try:
            session = await self._get_session()
            async with session.get(f"{self.host}/api/tags") as response:
                if response.status != 200:
                    raise ExternalServiceError(
                        f"Ollama server returned status {response.status}",
                        service=self.SERVICE,
                        status_code=response.status
                    )
                data = await response.json()
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise ExternalServiceError(
                f"Cannot reach Ollama at {self.host}: {e}",
                service=self.SERVICE
            ) from e

        return [m.get('name', '') for m in data.get('models', [])]

    async def health_check(self) -> Dict[str, Any]:
        """Check if Ollama server is running and the model is available."""
        try:
            models = await self.list_models()
        except ExternalServiceError as e:
            return {
                "healthy": False,
                "model": self._model_name,
                "details": str(e)
            }

        if not any(self._model_name in m for m in models):
            return {
                "healthy": False,
                "model": self._model_name,
                "details": f"Model not found. Available: {models}. Run: ollama pull {self._model_name}"
            }

        return {
            "healthy": True,
            "model": self._model_name,
            "details": "Ollama server running and model available"
        }

    def get_statistics(self) -> Dict[str, Any]:
        stats = super().get_statistics()
        stats["ollama_host"] = self.host
        stats["embedding_model"] = self.embedding_model
        return stats
