from __future__ import annotations

import logging
from typing import Optional

import httpx

from llm.schemas import GenerationOptions
from workbench.errors import AuthError, GenerationError
from .base import LLMProvider

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 30.0


class GeminiProvider(LLMProvider):
    """Managed Google Gemini models over the generateContent REST endpoint."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise AuthError("GEMINI_API_KEY is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def generate_text(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        options = options or GenerationOptions()
        model = options.model or self.model
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        generation_config = {}
        if options.temperature is not None:
            generation_config["temperature"] = options.temperature
        if options.max_tokens:
            generation_config["maxOutputTokens"] = options.max_tokens
        if options.top_p is not None:
            generation_config["topP"] = options.top_p

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        if options.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": options.system_prompt}]}

        try:
            async with httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT_S, transport=self._transport
            ) as client:
                r = await client.post(url, headers=headers, json=payload)
                if r.status_code == 401:
                    raise AuthError("Invalid Gemini API key")
                r.raise_for_status()
                data = r.json()
            candidates = data.get("candidates") or [{}]
            parts = (candidates[0].get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts)
        except AuthError:
            raise
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise GenerationError(f"Gemini error: {e}") from e

        logger.info(f"Gemini generated {len(text)} chars with model={model}")
        return text
