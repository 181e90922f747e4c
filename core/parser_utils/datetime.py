"""Reusable datetime helpers for parsers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from core.parser_utils.text import normalize_utterance

DEFAULT_PM_MARKERS = ("chiều", "tối", "pm")

_LETTER_AHEAD = r"(?![^\W\d_])"
_COMBINED_PATTERN = re.compile(r"(?<!\d)(\d+)[:\s](\d+)(?!\d)")
_HOUR_PATTERN = re.compile(rf"(?<!\d)(\d+)\s*(?:giờ|gio|h{_LETTER_AHEAD}|:|am|pm|sáng|trưa|chiều|tối|đêm)")
_MINUTE_PATTERN = re.compile(rf"(?<!\d)(\d+)\s*(?:phút|phut|p{_LETTER_AHEAD})")


@dataclass(frozen=True)
class ClockTime:
    hour: int
    minute: int

    def label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time_expression(text: str, pm_markers: Iterable[str] = DEFAULT_PM_MARKERS) -> Optional[ClockTime]:
    """Turn a loose Vietnamese time phrase into an hour/minute pair.

    A combined ``H:M`` / ``H M`` pair wins over separate ``<n> giờ`` and
    ``<n> phút`` tokens; a missing hour or minute defaults to 0. Afternoon and
    evening markers move hours below 12 into the afternoon (``12 chiều`` stays
    12). Returns ``None`` when nothing usable was said or a value is out of
    range.
    """

    lowered = normalize_utterance(text)
    if not lowered:
        return None

    is_pm = any(marker.lower() in lowered for marker in pm_markers)

    combined = _COMBINED_PATTERN.search(lowered)
    if combined:
        hour = int(combined.group(1))
        minute = int(combined.group(2))
    else:
        hour_match = _HOUR_PATTERN.search(lowered)
        minute_match = _MINUTE_PATTERN.search(lowered)
        if not hour_match and not minute_match:
            return None
        hour = int(hour_match.group(1)) if hour_match else 0
        minute = int(minute_match.group(1)) if minute_match else 0

    if is_pm and hour < 12:
        hour += 12

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return ClockTime(hour=hour, minute=minute)


def resolve_alarm_datetime(clock: ClockTime, now: Optional[datetime] = None) -> datetime:
    """Place ``clock`` on today's date, or tomorrow when that moment already passed."""

    reference = now or datetime.now()
    target = reference.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
    if target < reference:
        target += timedelta(days=1)
    return target


__all__ = ["ClockTime", "DEFAULT_PM_MARKERS", "parse_time_expression", "resolve_alarm_datetime"]
