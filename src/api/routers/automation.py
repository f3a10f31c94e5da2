import logging
import time
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from api.dependencies import (
    get_authorization_flow,
    get_calendar_materializer,
    get_provider_selector,
    get_settings,
    get_token_store,
)
from api.metrics import (
    ACTIVE_SESSIONS,
    CALENDAR_EVENTS_TOTAL,
    PROVIDER_SELECTED_TOTAL,
    REQUEST_LATENCY_SECONDS,
    REQUESTS_TOTAL,
)
from integration.calendar_integration import GOOGLE_CALENDAR_URL, CalendarMaterializer
from integration.google_oauth import AuthorizationFlow
from integration.ics_export import build_ics
from llm.provider_selector import ProviderSelector
from scheduling.goal_planner import GoalPlanner
from scheduling.schedule_generator import ScheduleGenerator
from storage.token_store import TokenStore
from workbench.config import Settings
from workbench.errors import WorkbenchError
from workbench.models import ChatMessage, StrategyContext

router = APIRouter()
logger = logging.getLogger(__name__)


class SyncCalendarIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    strategy_data: Optional[StrategyContext] = Field(None, alias="strategyData")
    customer_messages: List[ChatMessage] = Field(default_factory=list, alias="customerMessages")
    session_id: Optional[str] = Field(None, alias="sessionId")


class GoalPlanIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    goal: str = Field(..., min_length=1)
    strategy: str = ""
    constraints: List[str] = Field(default_factory=list)
    start_date: Optional[date] = Field(None, alias="startDate")


def _tomorrow(settings: Settings) -> date:
    return datetime.now(ZoneInfo(settings.calendar_timezone)).date() + timedelta(days=1)


@router.post("/api/pm/automation/sync-calendar")
async def sync_calendar(
    payload: SyncCalendarIn,
    settings: Settings = Depends(get_settings),
    selector: ProviderSelector = Depends(get_provider_selector),
    materializer: CalendarMaterializer = Depends(get_calendar_materializer),
    flow: AuthorizationFlow = Depends(get_authorization_flow),
    token_store: TokenStore = Depends(get_token_store),
):
    """Generate a 14-day plan from strategy + customer chat and push it to Google Calendar."""
    start = time.time()
    endpoint = "/api/pm/automation/sync-calendar"

    if payload.strategy_data is None:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status="invalid").inc()
        raise HTTPException(
            status_code=400,
            detail="Strategy data is required. Please generate a strategy first.",
        )
    if not payload.customer_messages:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status="invalid").inc()
        raise HTTPException(
            status_code=400,
            detail="Customer chat messages are required. Please talk to the customer chatbot first.",
        )

    provider = await selector.select_provider()
    PROVIDER_SELECTED_TOTAL.labels(provider=provider.name).inc()

    try:
        plan = await ScheduleGenerator(provider).generate(
            payload.strategy_data, payload.customer_messages, _tomorrow(settings)
        )
    except WorkbenchError as e:
        logger.error(f"Schedule generation failed: {e}")
        REQUESTS_TOTAL.labels(endpoint=endpoint, status="error").inc()
        raise HTTPException(status_code=500, detail=str(e))

    events = materializer.build_events(plan)
    result = await materializer.materialize(payload.session_id, plan)

    CALENDAR_EVENTS_TOTAL.labels(outcome="created").inc(result.created_count)
    CALENDAR_EVENTS_TOTAL.labels(outcome="failed").inc(result.failed_count)
    ACTIVE_SESSIONS.set(len(token_store))

    data = {
        "plan": [item.model_dump(mode="json") for item in plan],
        "calendarEvents": [event.model_dump(mode="json") for event in events],
    }

    if result.created_count > 0:
        status, code = "created", 200
        body = {
            "success": True,
            "needsAuth": result.needs_auth,
            "data": {
                **data,
                "googleCalendarUrl": GOOGLE_CALENDAR_URL,
                "eventsCreated": result.created_count,
                "eventLinks": result.event_links,
                "message": f"Successfully created {result.created_count} events in your Google Calendar!",
            },
        }
    elif result.needs_auth and not flow.configured:
        status, code = "oauth_not_configured", 500
        body = {
            "success": False,
            "error": "Google OAuth not configured. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.",
            "data": {
                **data,
                "message": "Google Calendar OAuth is not configured.",
            },
        }
    elif result.needs_auth:
        status, code = "needs_auth", 200
        body = {
            "success": False,
            "needsAuth": True,
            "authUrl": flow.begin_authorization(),
            "data": {
                **data,
                "message": "Please authorize Google Calendar access to create events automatically.",
            },
        }
    else:
        status, code = "planned", 200
        body = {
            "success": True,
            "data": {
                **data,
                "message": f"Schedule generated successfully! {len(events)} events ready.",
            },
        }

    REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    return JSONResponse(status_code=code, content=body)


@router.post("/api/pm/automation/plan")
async def goal_plan(
    payload: GoalPlanIn,
    settings: Settings = Depends(get_settings),
    selector: ProviderSelector = Depends(get_provider_selector),
    materializer: CalendarMaterializer = Depends(get_calendar_materializer),
) -> dict:
    """Goal-only 14-day plan with an .ics export; falls back to a fixed plan without AI."""
    start = time.time()
    endpoint = "/api/pm/automation/plan"

    start_date = payload.start_date or _tomorrow(settings)
    plan, source = await GoalPlanner(selector).generate(
        payload.goal, start_date, strategy=payload.strategy, constraints=payload.constraints
    )
    events = materializer.build_events(plan)

    REQUESTS_TOTAL.labels(endpoint=endpoint, status=source).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    return {
        "success": True,
        "data": {
            "plan": [item.model_dump(mode="json") for item in plan],
            "calendarEvents": [event.model_dump(mode="json") for event in events],
            "ics": build_ics(events, goal=payload.goal),
            "source": source,
        },
    }


@router.get("/api/pm/calendar/events")
async def calendar_events(
    sessionId: Optional[str] = None,
    timeMin: Optional[datetime] = None,
    timeMax: Optional[datetime] = None,
    materializer: CalendarMaterializer = Depends(get_calendar_materializer),
    flow: AuthorizationFlow = Depends(get_authorization_flow),
):
    """List the session's primary-calendar events."""
    try:
        events = await materializer.list_events(sessionId, timeMin, timeMax)
    except Exception as e:
        logger.error(f"Error listing calendar events: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    if events is None:
        body = {"needsAuth": True}
        if flow.configured:
            body["authUrl"] = flow.begin_authorization()
        return JSONResponse(status_code=401, content=body)
    return {"success": True, "data": {"events": events, "count": len(events)}}
