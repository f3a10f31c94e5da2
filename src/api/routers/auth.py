import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from api.dependencies import get_authorization_flow, get_token_store
from api.metrics import ACTIVE_SESSIONS
from integration.google_oauth import AuthorizationFlow
from storage.token_store import TokenStore
from workbench.errors import AuthError

router = APIRouter()
logger = logging.getLogger(__name__)


class DisconnectIn(BaseModel):
    session_id: str = Field(..., alias="sessionId")


def _redirect(location: str) -> Response:
    return Response(status_code=307, headers={"Location": location})


@router.get("/api/auth/google")
async def google_login(flow: AuthorizationFlow = Depends(get_authorization_flow)) -> dict:
    """Returns the Google consent URL for the browser to open."""
    try:
        return {"authUrl": flow.begin_authorization()}
    except AuthError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/auth/google/callback")
async def google_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    flow: AuthorizationFlow = Depends(get_authorization_flow),
    token_store: TokenStore = Depends(get_token_store),
) -> Response:
    """Handles the OAuth2 callback and hands the session id to the frontend."""
    if error:
        logger.error(f"OAuth error: {error}")
        return _redirect(flow.error_redirect(error))

    if not flow.configured:
        return _redirect(flow.error_redirect("oauth_not_configured"))

    if not code:
        return _redirect(flow.error_redirect("no_code"))

    try:
        session_id = await flow.complete_authorization(code)
    except AuthError as e:
        logger.error(f"OAuth callback failed: {e}")
        return _redirect(flow.error_redirect("auth_failed"))

    ACTIVE_SESSIONS.set(len(token_store))
    return _redirect(flow.success_redirect(session_id))


@router.get("/api/auth/google/status")
async def google_status(
    sessionId: Optional[str] = None,
    token_store: TokenStore = Depends(get_token_store),
) -> dict:
    """Check if a session is connected."""
    return token_store.status(sessionId)


@router.post("/api/auth/google/disconnect")
async def google_disconnect(
    payload: DisconnectIn,
    flow: AuthorizationFlow = Depends(get_authorization_flow),
    token_store: TokenStore = Depends(get_token_store),
) -> dict:
    """Forget the session's stored credentials."""
    await flow.invalidate(payload.session_id)
    ACTIVE_SESSIONS.set(len(token_store))
    return {"status": "disconnected"}
