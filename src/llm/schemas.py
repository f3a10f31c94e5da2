from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerationOptions(BaseModel):
    """Per-call generation knobs. Unset fields fall back to each provider's defaults."""

    model_config = ConfigDict(populate_by_name=True)

    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0, alias="maxTokens")
    top_p: Optional[float] = Field(default=None, gt=0.0, le=1.0)
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
