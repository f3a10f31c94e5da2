import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, Optional

from workbench.models import SessionCredential

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenStore:
    """Process-lifetime map of session id -> OAuth credential bundle.

    Nothing is persisted. Reads and writes are plain dict operations (atomic
    on the event loop); callers that read, use and then invalidate a
    credential hold `locked(session_id)` for the whole sequence.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._credentials: Dict[str, SessionCredential] = {}
        # holders plus waiters per session; the lock goes when this reaches zero
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._credentials

    def __len__(self) -> int:
        return len(self._credentials)

    def now(self) -> datetime:
        return self._clock()

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def locked(self, session_id: str) -> AsyncIterator[None]:
        """Serialise work on one session. The lock entry is dropped once nobody holds or awaits it."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]

    def save(self, session_id: str, credential: SessionCredential) -> None:
        self._credentials[session_id] = credential
        logger.info(f"Stored calendar credentials for session {session_id}")

    def get(self, session_id: Optional[str]) -> Optional[SessionCredential]:
        if not session_id:
            return None
        return self._credentials.get(session_id)

    def invalidate(self, session_id: str) -> bool:
        """Remove the credential. Returns False if there was none."""
        removed = self._credentials.pop(session_id, None) is not None
        if removed:
            logger.info(f"Invalidated calendar credentials for session {session_id}")
        return removed

    def status(self, session_id: Optional[str]) -> dict:
        credential = self.get(session_id)
        if credential is None:
            return {"connected": False, "expired": False}
        return {"connected": True, "expired": credential.is_expired(self.now())}
