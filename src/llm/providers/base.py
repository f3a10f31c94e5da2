from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from llm.json_extraction import extract_json
from llm.schemas import GenerationOptions
from workbench.errors import GenerationError, ParseError

logger = logging.getLogger(__name__)

JSON_INSTRUCTION = "\n\nReturn ONLY valid JSON, no markdown or extra text."


class LLMProvider(ABC):
    name: str = "provider"

    @abstractmethod
    async def generate_text(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        """
        Must return the model output as TEXT (JSON is parsed in generate_json).
        """
        raise NotImplementedError

    async def generate_json(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> Any:
        text = await self.generate_text(prompt + JSON_INSTRUCTION, options)
        try:
            return extract_json(text)
        except ParseError as e:
            logger.warning(f"{self.name} returned unparseable JSON: {text[:200]!r}")
            raise GenerationError(
                f"Failed to parse JSON from {self.name} response", raw_text=e.raw_text
            ) from e
