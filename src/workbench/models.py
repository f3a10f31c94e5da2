from __future__ import annotations

import datetime as dt
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Priority = Literal["high", "medium", "low"]


class PlanItem(BaseModel):
    """One day of a generated plan. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1)
    date: dt.date
    task: str = Field(..., min_length=1)
    description: str = ""
    duration: str = ""
    priority: Priority = "medium"
    category: str = "Task"
    status: Literal["planned"] = "planned"

    @field_validator("task")
    @classmethod
    def task_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("task must not be blank")
        return v2

    @field_validator("description", "duration", "category", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        # models sometimes emit numbers ("duration": 2) or nulls
        if v is None:
            return ""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip().lower() in {"high", "medium", "low"}:
            return v.strip().lower()
        return "medium"


class CalendarEventDescriptor(BaseModel):
    """A calendar event derived 1:1 from a PlanItem."""

    title: str
    description: str
    start: dt.datetime
    end: dt.datetime
    date: dt.date
    priority: Priority = "medium"
    category: str = "Task"


class SessionCredential(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expiry: Optional[dt.datetime] = None
    scopes: List[str] = Field(default_factory=list)

    def is_expired(self, now: dt.datetime) -> bool:
        if self.expiry is None:
            return False
        expiry = self.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=dt.timezone.utc)
        return expiry <= now


class ChatMessage(BaseModel):
    role: str
    content: str = ""


class StrategyContext(BaseModel):
    """Strategy produced by the strategy agent; only the fields we read are typed."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    north_star: str = Field("", alias="northStar")
    strategic_recommendations: List[str] = Field(
        default_factory=list, alias="strategicRecommendations"
    )
    market_opportunity: str = Field("", alias="marketOpportunity")
    risks: List[str] = Field(default_factory=list, alias="risksAndChallenges")
    timeline: str = Field("", alias="timelineAndMilestones")

    @field_validator("north_star", "market_opportunity", "timeline", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("strategic_recommendations", mode="before")
    @classmethod
    def recommendations_as_text(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(item) for item in v]

    @field_validator("risks", mode="before")
    @classmethod
    def risks_as_text(cls, v: Any) -> List[str]:
        # risks arrive either as plain strings or as {"risk": ..., "mitigation": ...}
        if v is None:
            return []
        if isinstance(v, (str, dict)):
            v = [v]
        out = []
        for item in v:
            if isinstance(item, dict):
                item = item.get("risk") or ""
            if item:
                out.append(str(item))
        return out


class MaterializeResult(BaseModel):
    created_count: int = 0
    failed_count: int = 0
    event_links: List[str] = Field(default_factory=list)
    needs_auth: bool = False
