from __future__ import annotations

import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


class Settings(BaseModel):
    """Runtime configuration, read from the environment."""

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:3b"

    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.1-8b-instant"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_redirect_uri: str = "http://localhost:8787/api/auth/google/callback"

    frontend_url: str = "http://localhost:8080"
    calendar_timezone: str = "UTC"
    event_start_hour: int = Field(9, ge=0, le=23)
    api_port: int = 8787

    @field_validator("calendar_timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown CALENDAR_TIMEZONE: {v!r}") from e
        return v

    @property
    def oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            ollama_base_url=_env("OLLAMA_BASE_URL", defaults.ollama_base_url),
            ollama_model=_env("OLLAMA_MODEL", defaults.ollama_model),
            groq_api_key=_env("GROQ_API_KEY"),
            groq_model=_env("GROQ_MODEL", defaults.groq_model),
            groq_base_url=_env("GROQ_BASE_URL", defaults.groq_base_url),
            gemini_api_key=_env("GEMINI_API_KEY"),
            gemini_model=_env("GEMINI_MODEL", defaults.gemini_model),
            gemini_base_url=_env("GEMINI_BASE_URL", defaults.gemini_base_url),
            google_client_id=_env("GOOGLE_CLIENT_ID"),
            google_client_secret=_env("GOOGLE_CLIENT_SECRET"),
            google_redirect_uri=_env("GOOGLE_REDIRECT_URI", defaults.google_redirect_uri),
            frontend_url=_env("FRONTEND_URL", defaults.frontend_url).rstrip("/"),
            calendar_timezone=_env("CALENDAR_TIMEZONE", defaults.calendar_timezone),
            event_start_hour=int(_env("EVENT_START_HOUR", str(defaults.event_start_hour))),
            api_port=int(_env("API_PORT", str(defaults.api_port))),
        )
