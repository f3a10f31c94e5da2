import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_provider_selector, get_settings, get_token_store
from api.metrics import ACTIVE_SESSIONS
from llm.provider_selector import ProviderSelector
from storage.token_store import TokenStore
from workbench.config import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    selector: ProviderSelector = Depends(get_provider_selector),
) -> dict:
    """Health check plus which AI provider a request would get right now."""
    provider = await selector.select_provider()
    return {
        "ok": True,
        "provider": provider.name,
        "hasKey": bool(settings.groq_api_key or settings.gemini_api_key),
        "oauthConfigured": settings.oauth_configured,
    }


@router.get("/metrics")
async def metrics(token_store: TokenStore = Depends(get_token_store)) -> Response:
    """
    Prometheus scrape endpoint.
    """
    ACTIVE_SESSIONS.set(len(token_store))
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
