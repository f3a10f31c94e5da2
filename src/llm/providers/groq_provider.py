from __future__ import annotations

import logging
from typing import Optional

import httpx

from llm.schemas import GenerationOptions
from workbench.errors import AuthError, GenerationError
from .base import LLMProvider

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 30.0
DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


class GroqProvider(LLMProvider):
    """Hosted OpenAI-compatible chat completions (Groq free tier, low latency)."""

    name = "groq"

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        base_url: str = "https://api.groq.com/openai/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise AuthError("GROQ_API_KEY is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def generate_text(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        options = options or GenerationOptions()
        model = options.model or self.model
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": options.system_prompt or DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7 if options.temperature is None else options.temperature,
            "max_tokens": options.max_tokens or 2048,
        }
        if options.top_p is not None:
            payload["top_p"] = options.top_p

        try:
            async with httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT_S, transport=self._transport
            ) as client:
                r = await client.post(url, headers=headers, json=payload)
                if r.status_code == 401:
                    raise AuthError(
                        "Invalid Groq API key. Get a free key at https://console.groq.com"
                    )
                r.raise_for_status()
                data = r.json()
            choices = data.get("choices") or [{}]
            text = (choices[0].get("message") or {}).get("content") or ""
        except AuthError:
            raise
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise GenerationError(f"Groq error: {e}") from e

        logger.info(f"Groq generated {len(text)} chars with model={model}")
        return text
