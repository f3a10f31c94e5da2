from fastapi import Depends

from api import state
from integration.calendar_integration import CalendarMaterializer
from integration.google_oauth import AuthorizationFlow
from llm.provider_selector import ProviderSelector
from storage.token_store import TokenStore
from workbench.config import Settings


def get_settings() -> Settings:
    return state.settings


def get_token_store() -> TokenStore:
    return state.token_store


def get_provider_selector(settings: Settings = Depends(get_settings)) -> ProviderSelector:
    return ProviderSelector.from_settings(settings)


def get_authorization_flow(
    settings: Settings = Depends(get_settings),
    token_store: TokenStore = Depends(get_token_store),
) -> AuthorizationFlow:
    return AuthorizationFlow(settings, token_store)


def get_calendar_materializer(
    settings: Settings = Depends(get_settings),
    token_store: TokenStore = Depends(get_token_store),
) -> CalendarMaterializer:
    return CalendarMaterializer(token_store, settings)
