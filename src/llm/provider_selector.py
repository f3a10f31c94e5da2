from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

import httpx

from llm.providers.base import LLMProvider
from llm.providers.gemini_provider import GeminiProvider
from llm.providers.groq_provider import GroqProvider
from llm.providers.mock_provider import MockProvider
from llm.providers.ollama_provider import OllamaProvider
from workbench.config import Settings
from workbench.errors import NoProviderAvailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderCandidate:
    """One entry of the priority list: an availability check plus a factory."""

    name: str
    check: Callable[[], Awaitable[bool]]
    factory: Callable[[], LLMProvider]


class ProviderSelector:
    """Picks the first usable provider from an ordered candidate list.

    Default order: local Ollama (probed), then Groq, then Gemini (both chosen
    on credential presence alone, no probe). When nothing qualifies the
    lenient mode hands back the demo provider, strict mode raises.
    """

    def __init__(
        self,
        candidates: List[ProviderCandidate],
        fallback: Optional[Callable[[], LLMProvider]] = MockProvider,
    ):
        self.candidates = list(candidates)
        self.fallback = fallback

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ProviderSelector":
        ollama = OllamaProvider(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            transport=transport,
        )

        async def has_groq_key() -> bool:
            return bool(settings.groq_api_key)

        async def has_gemini_key() -> bool:
            return bool(settings.gemini_api_key)

        return cls(
            [
                ProviderCandidate("ollama", ollama.is_available, lambda: ollama),
                ProviderCandidate(
                    "groq",
                    has_groq_key,
                    lambda: GroqProvider(
                        settings.groq_api_key,
                        model=settings.groq_model,
                        base_url=settings.groq_base_url,
                        transport=transport,
                    ),
                ),
                ProviderCandidate(
                    "gemini",
                    has_gemini_key,
                    lambda: GeminiProvider(
                        settings.gemini_api_key,
                        model=settings.gemini_model,
                        base_url=settings.gemini_base_url,
                        transport=transport,
                    ),
                ),
            ]
        )

    async def select_provider(self, strict: bool = False) -> LLMProvider:
        for candidate in self.candidates:
            try:
                usable = await candidate.check()
            except Exception as e:
                # a broken probe only means "skip this one"
                logger.info(f"Availability check for {candidate.name} failed: {e}")
                usable = False
            if usable:
                logger.info(f"Using AI provider: {candidate.name}")
                return candidate.factory()

        if strict or self.fallback is None:
            raise NoProviderAvailable(
                "No AI provider available. Set up one of: Ollama (https://ollama.ai), "
                "GROQ_API_KEY, or GEMINI_API_KEY."
            )

        logger.warning("No AI provider available, using demo responses")
        return self.fallback()
