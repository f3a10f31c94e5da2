import json

import pytest

from llm.providers.base import LLMProvider
from storage.token_store import TokenStore
from workbench.config import Settings
from workbench.models import SessionCredential


class FakeProvider(LLMProvider):
    name = "fake"

    def __init__(self, response_text: str):
        self._response_text = response_text
        self.prompts = []

    async def generate_text(self, prompt, options=None) -> str:
        self.prompts.append(prompt)
        return self._response_text


class FakeCalendarService:
    """Stands in for GoogleCalendarService. `failures` maps call index -> exception."""

    def __init__(self, failures=None, events=None):
        self.failures = failures or {}
        self.events = events or []
        self.inserted = []

    def insert_event(self, body):
        index = len(self.inserted)
        self.inserted.append(body)
        if index in self.failures:
            raise self.failures[index]
        return {"id": f"evt{index}", "htmlLink": f"https://calendar.google.com/event?eid=evt{index}"}

    def list_events(self, time_min=None, time_max=None):
        return self.events


def make_plan_json(days: int = 14, **overrides) -> str:
    items = []
    for i in range(1, days + 1):
        item = {
            "day": i,
            "task": f"Task {i}",
            "description": f"Do thing {i}",
            "duration": "3 hours",
            "priority": "high",
            "category": "Research",
        }
        item.update(overrides)
        items.append(item)
    return json.dumps(items)


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def plan_json():
    return make_plan_json


@pytest.fixture
def settings():
    return Settings(
        google_client_id="client-id.apps.googleusercontent.com",
        google_client_secret="client-secret",
        google_redirect_uri="http://localhost:8787/api/auth/google/callback",
        frontend_url="http://localhost:8080",
        calendar_timezone="Europe/Bratislava",
    )


@pytest.fixture
def token_store():
    return TokenStore()


@pytest.fixture
def credential():
    return SessionCredential(access_token="ya29.token", refresh_token="1//refresh")
