"""Alarm tool: understand the requested time and hand it to the schedulers."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Protocol, Sequence
from uuid import uuid4

from core.errors import AssistantError, IntegrationFailure, PermissionDenied, RecognitionFailure
from core.json_storage import atomic_write_json, read_record_list
from core.parser_utils.datetime import DEFAULT_PM_MARKERS, parse_time_expression, resolve_alarm_datetime
from core.tool_registry import ToolOutcome

logger = logging.getLogger(__name__)

ALARM_TITLE = "Báo thức"
ALARM_BODY = "Đã đến giờ báo thức của bạn!"
EVENT_DURATION = timedelta(minutes=5)


class AlarmScheduler(Protocol):
    """Anything that can register an alarm at an absolute time."""

    def schedule(self, when: datetime, title: str) -> Dict[str, Any]:
        ...


class JsonAlarmScheduler:
    """Stores alarms as five-minute calendar events in a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    def schedule(self, when: datetime, title: str) -> Dict[str, Any]:
        event = {
            "id": uuid4().hex,
            "title": title,
            "body": ALARM_BODY,
            "start": when.isoformat(),
            "end": (when + EVENT_DURATION).isoformat(),
        }
        try:
            with self._lock:
                events = self.list_events()
                events.append(event)
                atomic_write_json(self._path, events)
        except OSError as exc:
            raise IntegrationFailure("Could not write alarm store", detail=str(exc)) from exc
        return event

    def list_events(self) -> List[Dict[str, Any]]:
        return read_record_list(self._path)


def build_android_alarm_uri(when: datetime) -> str:
    """Deep link the Android clock app understands for a one-off alarm."""
    return (
        "intent:#Intent;action=android.intent.action.SET_ALARM;"
        f"i.android.intent.extra.alarm.HOUR={when.hour};"
        f"i.android.intent.extra.alarm.MINUTES={when.minute};"
        "b.android.intent.extra.alarm.SKIP_UI=false;end"
    )


def format_alarm_time(when: datetime) -> str:
    return when.strftime("%H:%M ngày %d/%m/%Y")


class AlarmTool:
    """Turns an alarm intent into scheduled alarms on every configured backend."""

    def __init__(
        self,
        schedulers: Sequence[AlarmScheduler],
        *,
        pm_markers: Iterable[str] = DEFAULT_PM_MARKERS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._schedulers = tuple(schedulers)
        self._pm_markers = tuple(pm_markers)
        self._clock = clock

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        raw_time = str(payload.get("raw_time_text") or "").strip()
        parsed = parse_time_expression(raw_time, self._pm_markers)
        if parsed is None:
            failure = RecognitionFailure(
                f'Không hiểu định dạng thời gian "{raw_time}". Thử lại với "7 giờ sáng" hoặc "3:45 chiều".'
            )
            return ToolOutcome(
                text=failure.message,
                summary={"raw_time_text": raw_time},
                error=failure.code,
            )

        when = resolve_alarm_datetime(parsed, self._clock())
        summary: Dict[str, Any] = {
            "raw_time_text": raw_time,
            "hour": parsed.hour,
            "minute": parsed.minute,
            "scheduled_for": when.isoformat(),
            "android_uri": build_android_alarm_uri(when),
            "scheduled": [],
            "skipped": [],
        }

        errors: List[AssistantError] = []
        for scheduler in self._schedulers:
            name = type(scheduler).__name__
            try:
                summary["scheduled"].append({"scheduler": name, **scheduler.schedule(when, ALARM_TITLE)})
            except PermissionDenied as exc:
                logger.info("%s skipped: %s", name, exc.message)
                summary["skipped"].append({"scheduler": name, "reason": exc.code})
                errors.append(exc)
            except AssistantError as exc:
                logger.warning("%s failed: %s", name, exc.message)
                summary["skipped"].append({"scheduler": name, "reason": exc.code})
                errors.append(exc)

        readable = format_alarm_time(when)
        if not summary["scheduled"]:
            first = errors[0] if errors else IntegrationFailure("No alarm backend is configured")
            if isinstance(first, PermissionDenied):
                text = f"Không có quyền đặt báo thức cho {readable}. Vui lòng cấp quyền rồi thử lại."
            else:
                text = f"Không thể đặt báo thức cho {readable}. Vui lòng thử lại sau."
            return ToolOutcome(text=text, summary=summary, error=first.code)

        text = f"Đã đặt báo thức lúc {readable}."
        return ToolOutcome(text=text, summary=summary, speech=f"Đã đặt báo thức lúc {parsed.label()}")


__all__ = [
    "ALARM_TITLE",
    "AlarmScheduler",
    "AlarmTool",
    "JsonAlarmScheduler",
    "build_android_alarm_uri",
    "format_alarm_time",
]
