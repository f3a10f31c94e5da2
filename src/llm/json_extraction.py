"""Recover a JSON value from free-form model output."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from workbench.errors import ParseError

_FENCE_RE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)

_CLOSERS = {"{": "}", "[": "]"}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` fence (with or without a language tag)."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def _greedy_span(text: str, opener: str) -> Optional[str]:
    start = text.find(opener)
    if start < 0:
        return None
    end = text.rfind(_CLOSERS[opener])
    if end <= start:
        return None
    return text[start : end + 1]


def extract_json(raw_text: str) -> Any:
    """Parse model output as JSON, tolerating code fences and surrounding prose.

    First the (unfenced) text is parsed directly. If that fails, the span from
    the first opening brace/bracket to the last matching closer is parsed.
    Raises ParseError carrying the original text when neither works.
    """
    text = strip_code_fence((raw_text or "").strip())

    try:
        return json.loads(text)
    except ValueError:
        pass

    openers = sorted((text.find(ch), ch) for ch in _CLOSERS if ch in text)
    for _, opener in openers:
        span = _greedy_span(text, opener)
        if span is None:
            continue
        try:
            return json.loads(span)
        except ValueError:
            continue

    raise ParseError("No JSON value could be recovered from model output", raw_text)
