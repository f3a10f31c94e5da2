from __future__ import annotations

import logging
from typing import Optional

import httpx

from llm.schemas import GenerationOptions
from workbench.errors import GenerationError, ProviderUnavailable
from .base import LLMProvider

logger = logging.getLogger(__name__)

GENERATE_TIMEOUT_S = 60.0
PROBE_TIMEOUT_S = 2.0


class OllamaProvider(LLMProvider):
    """Local inference daemon. Free and keyless, so it is always tried first."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2:3b",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def is_available(self) -> bool:
        """Cheap reachability probe against the model listing endpoint."""
        try:
            async with self._client(PROBE_TIMEOUT_S) as client:
                r = await client.get(f"{self.base_url}/api/tags")
                r.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.info(f"Ollama not available at {self.base_url}: {e}")
            return False

    async def generate_text(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        """Any connect failure, an unknown host included, raises ProviderUnavailable."""
        options = options or GenerationOptions()
        model = options.model or self.model
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": 0.7 if options.temperature is None else options.temperature,
                "top_p": options.top_p or 0.9,
            },
        }
        if options.max_tokens:
            payload["options"]["num_predict"] = options.max_tokens
        if options.system_prompt:
            payload["system"] = options.system_prompt

        try:
            async with self._client(GENERATE_TIMEOUT_S) as client:
                r = await client.post(f"{self.base_url}/api/generate", json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.ConnectError as e:
            raise ProviderUnavailable(
                f"Ollama is not reachable at {self.base_url} (not running, or wrong host). "
                "Install and start it: https://ollama.ai"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise GenerationError(f"Ollama error: {e}") from e

        text = data.get("response") or ""
        logger.info(f"Ollama generated {len(text)} chars with model={model}")
        return text
