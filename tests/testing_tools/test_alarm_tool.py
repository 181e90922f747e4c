import json
from datetime import datetime

import pytest

from core.errors import IntegrationFailure, PermissionDenied
from tools.alarm_tool import AlarmTool, JsonAlarmScheduler, build_android_alarm_uri, format_alarm_time

NOW = datetime(2024, 5, 1, 6, 30)


class RecordingScheduler:
    def __init__(self) -> None:
        self.calls: list[tuple[datetime, str]] = []

    def schedule(self, when, title):
        self.calls.append((when, title))
        return {"id": f"evt-{len(self.calls)}"}


class DeniedScheduler:
    def schedule(self, when, title):
        raise PermissionDenied("Calendar access refused")


class BrokenScheduler:
    def schedule(self, when, title):
        raise IntegrationFailure("Calendar write failed", detail="disk full")


def _tool(*schedulers):
    return AlarmTool(schedulers, clock=lambda: NOW)


def test_morning_alarm_is_scheduled_today():
    scheduler = RecordingScheduler()
    outcome = _tool(scheduler)({"raw_time_text": "7 giờ sáng"}, request_id="r1")

    assert outcome.error is None
    assert scheduler.calls == [(datetime(2024, 5, 1, 7, 0), "Báo thức")]
    assert outcome.text == "Đã đặt báo thức lúc 07:00 ngày 01/05/2024."
    assert outcome.speech == "Đã đặt báo thức lúc 07:00"
    assert outcome.summary["hour"] == 7 and outcome.summary["minute"] == 0


def test_afternoon_combined_time_is_shifted():
    scheduler = RecordingScheduler()
    outcome = _tool(scheduler)({"raw_time_text": "3:45 chiều"}, request_id="r1")
    assert scheduler.calls[0][0] == datetime(2024, 5, 1, 15, 45)
    assert outcome.summary["scheduled_for"] == "2024-05-01T15:45:00"


def test_past_time_rolls_over_to_tomorrow():
    scheduler = RecordingScheduler()
    _tool(scheduler)({"raw_time_text": "6:00"}, request_id="r1")
    assert scheduler.calls[0][0] == datetime(2024, 5, 2, 6, 0)


def test_unparseable_time_asks_for_clarification():
    scheduler = RecordingScheduler()
    outcome = _tool(scheduler)({"raw_time_text": "sáng mai"}, request_id="r1")

    assert outcome.error == "recognition_failure"
    assert outcome.text == 'Không hiểu định dạng thời gian "sáng mai". Thử lại với "7 giờ sáng" hoặc "3:45 chiều".'
    assert scheduler.calls == []


def test_permission_denied_scheduler_is_skipped_when_another_succeeds():
    scheduler = RecordingScheduler()
    outcome = _tool(DeniedScheduler(), scheduler)({"raw_time_text": "7:15"}, request_id="r1")

    assert outcome.error is None
    assert outcome.summary["skipped"] == [{"scheduler": "DeniedScheduler", "reason": "permission_denied"}]
    assert outcome.summary["scheduled"][0]["scheduler"] == "RecordingScheduler"


def test_all_schedulers_denied_reports_permission_problem():
    outcome = _tool(DeniedScheduler())({"raw_time_text": "7:15"}, request_id="r1")
    assert outcome.error == "permission_denied"
    assert outcome.text.startswith("Không có quyền đặt báo thức")


def test_all_schedulers_failing_reports_integration_failure():
    outcome = _tool(BrokenScheduler())({"raw_time_text": "7:15"}, request_id="r1")
    assert outcome.error == "integration_failure"
    assert outcome.text.startswith("Không thể đặt báo thức")


def test_android_uri_carries_hour_and_minute():
    uri = build_android_alarm_uri(datetime(2024, 5, 1, 15, 45))
    assert "action=android.intent.action.SET_ALARM" in uri
    assert "alarm.HOUR=15" in uri
    assert "alarm.MINUTES=45" in uri


def test_format_alarm_time():
    assert format_alarm_time(datetime(2024, 12, 9, 5, 7)) == "05:07 ngày 09/12/2024"


def test_json_scheduler_persists_five_minute_events(tmp_path):
    path = tmp_path / "alarms.json"
    scheduler = JsonAlarmScheduler(path)

    event = scheduler.schedule(datetime(2024, 5, 1, 7, 0), "Báo thức")
    scheduler.schedule(datetime(2024, 5, 2, 7, 0), "Báo thức")

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert len(stored) == 2
    assert stored[0]["id"] == event["id"]
    assert stored[0]["start"] == "2024-05-01T07:00:00"
    assert stored[0]["end"] == "2024-05-01T07:05:00"
    assert scheduler.list_events() == stored


def test_json_scheduler_recovers_from_corrupt_file(tmp_path):
    path = tmp_path / "alarms.json"
    path.write_text("{not json", encoding="utf-8")
    scheduler = JsonAlarmScheduler(path)
    assert scheduler.list_events() == []
    scheduler.schedule(datetime(2024, 5, 1, 7, 0), "Báo thức")
    assert len(scheduler.list_events()) == 1


def test_json_scheduler_write_errors_become_integration_failures(tmp_path, monkeypatch):
    import tools.alarm_tool as alarm_tool

    def fail(*args, **kwargs):
        raise OSError("read-only")

    monkeypatch.setattr(alarm_tool, "atomic_write_json", fail)
    with pytest.raises(IntegrationFailure):
        JsonAlarmScheduler(tmp_path / "alarms.json").schedule(datetime(2024, 5, 1, 7, 0), "Báo thức")


def test_no_scheduler_configured_is_not_reported_as_success():
    outcome = _tool()({"raw_time_text": "7:15"}, request_id="r1")
    assert outcome.error == "integration_failure"
    assert outcome.text.startswith("Không thể đặt báo thức")
    assert outcome.summary["scheduled"] == []
