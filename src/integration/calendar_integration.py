import asyncio
import logging
from datetime import datetime, time
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from integration.google_oauth import TOKEN_URI
from scheduling.durations import parse_duration
from storage.token_store import TokenStore
from workbench.config import Settings
from workbench.models import (
    CalendarEventDescriptor,
    MaterializeResult,
    PlanItem,
    SessionCredential,
)

logger = logging.getLogger(__name__)

CALENDAR_ID = "primary"
GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/u/0/r"


def is_grant_error(exc: BaseException) -> bool:
    """Whether a calendar API failure means the stored grant is no longer usable."""
    if isinstance(exc, RefreshError):
        return True
    if isinstance(exc, HttpError) and exc.resp is not None and exc.resp.status == 401:
        return True
    message = str(exc).lower()
    return "invalid_grant" in message or "expired" in message


class GoogleCalendarService:
    """Google Calendar v3 client for one session's access token."""

    def __init__(self, credential: SessionCredential, settings: Settings):
        # only the access token: no refresh is attempted, a 401 surfaces as an error
        creds = Credentials(
            token=credential.access_token,
            token_uri=TOKEN_URI,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            scopes=credential.scopes or None,
        )
        self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)

    def insert_event(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return (
            self.service.events()
            .insert(calendarId=CALENDAR_ID, body=body)
            .execute()
        )

    def list_events(
        self, time_min: Optional[datetime] = None, time_max: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "calendarId": CALENDAR_ID,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_min is not None:
            params["timeMin"] = time_min.isoformat()
        if time_max is not None:
            params["timeMax"] = time_max.isoformat()
        result = self.service.events().list(**params).execute()
        return result.get("items", [])


ServiceFactory = Callable[[SessionCredential], Any]


class CalendarMaterializer:
    """Turns a plan into calendar events and creates them for a session.

    Creation is best effort: events are inserted one at a time, in order, and a
    failure on one never stops the rest. A rejected grant invalidates the
    session and flags `needs_auth`, but the created count still stands.
    """

    def __init__(
        self,
        token_store: TokenStore,
        settings: Settings,
        service_factory: Optional[ServiceFactory] = None,
    ):
        self.token_store = token_store
        self.settings = settings
        self.timezone = settings.calendar_timezone
        self._service_factory = service_factory or (
            lambda credential: GoogleCalendarService(credential, settings)
        )

    def build_events(self, plan: Sequence[PlanItem]) -> List[CalendarEventDescriptor]:
        tz = ZoneInfo(self.timezone)
        start_at = time(self.settings.event_start_hour, 0)
        events = []
        for item in plan:
            start = datetime.combine(item.date, start_at, tzinfo=tz)
            events.append(
                CalendarEventDescriptor(
                    title=item.task,
                    description=item.description or item.task,
                    start=start,
                    end=start + parse_duration(item.duration),
                    date=item.date,
                    priority=item.priority,
                    category=item.category,
                )
            )
        return events

    def event_body(self, event: CalendarEventDescriptor) -> Dict[str, Any]:
        return {
            "summary": event.title,
            "description": event.description,
            "start": {"dateTime": event.start.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": event.end.isoformat(), "timeZone": self.timezone},
        }

    async def materialize(
        self, session_id: Optional[str], plan: Sequence[PlanItem]
    ) -> MaterializeResult:
        if self.token_store.get(session_id) is None:
            return MaterializeResult(needs_auth=True)

        async with self.token_store.locked(session_id):
            credential = self.token_store.get(session_id)
            if credential is None:
                return MaterializeResult(needs_auth=True)
            return await self._create_events(session_id, credential, self.build_events(plan))

    async def _create_events(
        self,
        session_id: str,
        credential: SessionCredential,
        events: List[CalendarEventDescriptor],
    ) -> MaterializeResult:
        result = MaterializeResult()

        try:
            service = self._service_factory(credential)
        except Exception as e:
            logger.error(f"Could not create calendar client: {e}")
            if is_grant_error(e):
                self._invalidate(session_id, result)
            return result

        for event in events:
            try:
                response = await asyncio.to_thread(service.insert_event, self.event_body(event))
            except Exception as e:
                logger.warning(f"Error creating event {event.title!r}: {e}")
                result.failed_count += 1
                if is_grant_error(e):
                    self._invalidate(session_id, result)
                continue

            result.created_count += 1
            link = (response or {}).get("htmlLink")
            if link:
                result.event_links.append(link)

        logger.info(
            f"Created {result.created_count}/{len(events)} calendar events for session {session_id}"
        )
        return result

    def _invalidate(self, session_id: str, result: MaterializeResult) -> None:
        if not result.needs_auth:
            logger.warning(f"Calendar grant rejected for session {session_id}; re-authorization needed")
            self.token_store.invalidate(session_id)
        result.needs_auth = True

    async def list_events(
        self,
        session_id: Optional[str],
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> Optional[List[Dict[str, Any]]]:
        """Session's primary-calendar events, or None when re-authorization is needed."""
        if self.token_store.get(session_id) is None:
            return None

        async with self.token_store.locked(session_id):
            credential = self.token_store.get(session_id)
            if credential is None:
                return None
            try:
                service = self._service_factory(credential)
                return await asyncio.to_thread(service.list_events, time_min, time_max)
            except Exception as e:
                if is_grant_error(e):
                    logger.warning(f"Calendar grant rejected for session {session_id}")
                    self.token_store.invalidate(session_id)
                    return None
                raise
