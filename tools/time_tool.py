"""Answer "mấy giờ rồi?" with the local time and date."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict

from core.tool_registry import ToolOutcome


def format_current_time(now: datetime) -> str:
    return f"Bây giờ là {now.strftime('%H:%M:%S')}, ngày {now.strftime('%d/%m/%Y')}"


class TimeQueryTool:
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        now = self._clock()
        text = format_current_time(now)
        return ToolOutcome(text=text, summary={"now": now.replace(microsecond=0).isoformat()}, speech=text)


__all__ = ["TimeQueryTool", "format_current_time"]
