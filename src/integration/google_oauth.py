import asyncio
import logging
import secrets
from datetime import timezone
from urllib.parse import urlencode

from google_auth_oauthlib.flow import Flow

from storage.token_store import TokenStore
from workbench.config import Settings
from workbench.errors import AuthError
from workbench.models import SessionCredential

logger = logging.getLogger(__name__)

CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def new_session_id() -> str:
    return f"session_{secrets.token_urlsafe(16)}"


class AuthorizationFlow:
    """Google OAuth authorization-code flow bound to opaque session ids.

    Session lifecycle: unauthenticated -> (code exchange) -> authorized ->
    (calendar API rejects the grant) -> unauthenticated. There is no proactive
    refresh; an expired grant is discovered when it is used.
    """

    def __init__(self, settings: Settings, token_store: TokenStore):
        self.settings = settings
        self.token_store = token_store

    @property
    def configured(self) -> bool:
        return self.settings.oauth_configured

    def _build_flow(self) -> Flow:
        if not self.configured:
            raise AuthError(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )
        return Flow.from_client_config(
            {
                "web": {
                    "client_id": self.settings.google_client_id,
                    "client_secret": self.settings.google_client_secret,
                    "auth_uri": AUTH_URI,
                    "token_uri": TOKEN_URI,
                }
            },
            scopes=CALENDAR_SCOPES,
            redirect_uri=self.settings.google_redirect_uri,
            # begin and complete run on different Flow instances, so no PKCE verifier
            autogenerate_code_verifier=False,
        )

    def begin_authorization(self) -> str:
        """URL to send the browser to. Forces consent so a refresh token is always issued."""
        flow = self._build_flow()
        authorization_url, _state = flow.authorization_url(
            access_type="offline", prompt="consent"
        )
        return authorization_url

    async def complete_authorization(self, code: str) -> str:
        """Exchange the authorization code, store the credential, return a new session id."""
        flow = self._build_flow()
        try:
            await asyncio.to_thread(flow.fetch_token, code=code)
        except Exception as e:
            logger.error(f"OAuth code exchange failed: {e}")
            raise AuthError(f"Authorization code exchange failed: {e}") from e

        credentials = flow.credentials
        expiry = credentials.expiry
        # google-auth hands back naive UTC
        if expiry is not None and expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)

        session_id = new_session_id()
        self.token_store.save(
            session_id,
            SessionCredential(
                access_token=credentials.token,
                refresh_token=credentials.refresh_token,
                expiry=expiry,
                scopes=list(credentials.scopes or CALENDAR_SCOPES),
            ),
        )
        return session_id

    async def invalidate(self, session_id: str) -> bool:
        if self.token_store.get(session_id) is None:
            return False
        async with self.token_store.locked(session_id):
            return self.token_store.invalidate(session_id)

    def success_redirect(self, session_id: str) -> str:
        query = urlencode({"auth": "success", "session": session_id})
        return f"{self.settings.frontend_url}/workbench?{query}"

    def error_redirect(self, reason: str) -> str:
        return f"{self.settings.frontend_url}/workbench?{urlencode({'error': reason})}"
