"""Alarm intent parsing."""

from __future__ import annotations

import re
from typing import Optional

from core.parser_utils import extract_trailing_span
from core.parsers.types import ALARM, Intent

_ALARM_PATTERN = re.compile(
    r"(?:đặt|cài|hẹn|báo|set)\s+(?:báo thức|báo|alarm|thức dậy|thức giấc)\s+(?:(?:lúc|vào|cho|at|for)\s+)?(?P<time>.+)",
    re.IGNORECASE,
)


def matches(lowered: str) -> bool:
    """Fast keyword guard before the full alarm pattern runs."""
    return bool(_ALARM_PATTERN.search(lowered))


def parse(message: str, lowered: str) -> Optional[Intent]:
    """Keep the raw time text; the alarm tool decides whether it is understandable."""
    raw_time = extract_trailing_span(message, _ALARM_PATTERN, "time")
    if not raw_time:
        return None
    return Intent(kind=ALARM, payload={"message": message, "raw_time_text": raw_time})


__all__ = ["matches", "parse"]
