from __future__ import annotations
import json
from typing import Optional

from llm.providers.base import JSON_INSTRUCTION, LLMProvider
from llm.schemas import GenerationOptions

DEMO_TEXT = (
    "This is a demo response. Please set up an AI provider "
    "(Ollama, Groq, or Gemini) to get real AI responses."
)

DEMO_OBJECT = {
    "executiveSummary": "This is a demo response. Please set up an AI provider to get real AI responses.",
    "northStar": "Demo metric",
    "strategicRecommendations": ["Demo recommendation 1", "Demo recommendation 2"],
}


class MockProvider(LLMProvider):
    """No-op demo provider used when nothing real is configured. Never fails.

    Answers are fixed placeholders. A JSON request always gets the demo
    object, so anything expecting a plan array rejects it instead of
    turning placeholder text into calendar events.
    """

    name = "demo"

    async def generate_text(
        self, prompt: str, options: Optional[GenerationOptions] = None
    ) -> str:
        if JSON_INSTRUCTION in prompt:
            return json.dumps(DEMO_OBJECT)
        return DEMO_TEXT
