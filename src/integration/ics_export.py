from __future__ import annotations

import hashlib
from typing import Optional, Sequence

from icalendar import Calendar, Event

from workbench.models import CalendarEventDescriptor

PRODID = "-//PM Workbench//Schedule Automation//EN"


def _uid(event: CalendarEventDescriptor) -> str:
    digest = hashlib.sha1(
        f"{event.start.isoformat()}|{event.title}".encode("utf-8")
    ).hexdigest()[:16]
    return f"{digest}@pm-workbench"


def build_ics(events: Sequence[CalendarEventDescriptor], goal: Optional[str] = None) -> str:
    """Render events as an iCalendar document for download/import."""
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")

    for event in events:
        description = event.description
        if goal:
            description = f"{description}\n\nGoal: {goal}"

        vevent = Event()
        vevent.add("uid", _uid(event))
        vevent.add("summary", event.title)
        vevent.add("description", description)
        vevent.add("dtstart", event.start)
        vevent.add("dtend", event.end)
        vevent.add("status", "TENTATIVE")
        vevent.add("transp", "OPAQUE")
        vevent.add("categories", [event.category])
        cal.add_component(vevent)

    return cal.to_ical().decode("utf-8")
