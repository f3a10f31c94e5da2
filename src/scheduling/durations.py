from __future__ import annotations

import re
from datetime import timedelta
from typing import Optional, Union

DEFAULT_DURATION = timedelta(hours=2)

# <number> <unit>, e.g. "2 hours", "90 min", "1.5h". Anything else ("half day",
# "all afternoon") is not understood and maps to DEFAULT_DURATION.
_DURATION_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|h|minutes?|mins?)\b",
    re.IGNORECASE,
)


def parse_duration(
    text: Union[str, int, float, None], default: timedelta = DEFAULT_DURATION
) -> timedelta:
    """Parse a free-text time estimate into a timedelta."""
    if text is None:
        return default

    match: Optional[re.Match] = _DURATION_RE.search(str(text))
    if not match:
        return default

    amount = float(match.group(1))
    if amount <= 0:
        return default

    if match.group(2).lower().startswith("h"):
        return timedelta(hours=amount)
    return timedelta(minutes=amount)
