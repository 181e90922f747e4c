import json
import threading

import pytest

from core.conversation_state import ConversationSession
from core.dispatcher import DEFAULT_SEEN_LIMIT, HANDLED, IDLE, PROCESSING, UNHANDLED, CommandDispatcher
from core.errors import IntegrationFailure
from core.geo import Coordinate
from core.parsers.types import ALARM, CHAT, DIRECTIONS, HISTORY_CLEAR, HISTORY_QUERY
from core.route_history import RouteHistoryStore
from core.tool_registry import ToolOutcome, ToolRegistry
from core.turn_logger import TurnLogger
from tools import load_all_core_tools
from tools.chat_tool import APOLOGY_TEXT
from tools.history_tool import EMPTY_HISTORY_TEXT

START = Coordinate(21.0287, 105.8524)
END = Coordinate(21.0030, 105.8196)


class StubChat:
    def __init__(self, reply="Xin chào bạn!", error=None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[str] = []

    def send_message(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.reply


class StubPipeline:
    def __init__(self, places=None) -> None:
        self.places = places or {}

    def resolve_place(self, name):
        return self.places.get(name)

    def fetch_route(self, start, end):
        return (start, end)


class RecordingScheduler:
    def __init__(self) -> None:
        self.calls = []

    def schedule(self, when, title):
        self.calls.append(when)
        return {"id": "evt"}


def _build(tmp_path, *, chat=None, places=None, turn_logger=None, seen_limit=DEFAULT_SEEN_LIMIT):
    session = ConversationSession()
    history = RouteHistoryStore(tmp_path / "history.json")
    registry = ToolRegistry()
    chat = chat or StubChat()
    scheduler = RecordingScheduler()
    load_all_core_tools(
        registry,
        session=session,
        history=history,
        pipeline=StubPipeline(places),
        chat_backend=chat,
        schedulers=[scheduler],
        opener=lambda url: True,
    )
    dispatcher = CommandDispatcher(
        registry, session, history=history, turn_logger=turn_logger, seen_limit=seen_limit
    )
    return dispatcher, chat, scheduler


def test_directions_records_history_even_when_geocoding_fails(tmp_path):
    dispatcher, chat, _ = _build(tmp_path)

    result = dispatcher.dispatch("từ Hồ Gươm đến Ngã Tư Sở")

    assert result.status == HANDLED
    assert result.intent.kind == DIRECTIONS
    assert result.error == "lookup_failure"
    assert result.text == "Không thể tìm thấy địa điểm Hồ Gươm"
    records = dispatcher.history.load()
    assert [(r.start, r.end) for r in records] == [("Hồ Gươm", "Ngã Tư Sở")]
    assert chat.calls == []


def test_undecodable_history_file_does_not_break_requests(tmp_path):
    dispatcher, chat, _ = _build(tmp_path)
    (tmp_path / "history.json").write_bytes(b"[\xff\xfe garbage")

    listing = dispatcher.dispatch("lịch sử tìm kiếm")
    assert listing.intent.kind == HISTORY_QUERY
    assert listing.error is None
    assert listing.text == EMPTY_HISTORY_TEXT

    directions = dispatcher.dispatch("từ Hồ Gươm đến Ngã Tư Sở")
    assert directions.error == "lookup_failure"
    assert [(r.start, r.end) for r in dispatcher.history.load()] == [("Hồ Gươm", "Ngã Tư Sở")]
    assert chat.calls == []


def test_alarm_scenario_uses_parsed_time(tmp_path):
    dispatcher, _, scheduler = _build(tmp_path)

    result = dispatcher.dispatch("đặt báo thức lúc 3:45 chiều")

    assert result.intent.kind == ALARM
    assert result.intent.payload["raw_time_text"] == "3:45 chiều"
    assert (scheduler.calls[0].hour, scheduler.calls[0].minute) == (15, 45)


def test_unrecognized_input_goes_to_chat_exactly_once(tmp_path):
    dispatcher, chat, _ = _build(tmp_path)

    result = dispatcher.dispatch("Kể cho tôi một câu chuyện cười")

    assert chat.calls == ["Kể cho tôi một câu chuyện cười"]
    assert result.status == UNHANDLED
    assert result.handled is False
    assert result.intent.kind == CHAT
    assert result.text == "Xin chào bạn!"
    texts = [message["text"] for message in dispatcher.session.messages()]
    assert texts == ["Kể cho tôi một câu chuyện cười", "Xin chào bạn!"]


def test_chat_failure_becomes_apology(tmp_path):
    dispatcher, chat, _ = _build(tmp_path, chat=StubChat(error=IntegrationFailure("down")))

    result = dispatcher.dispatch("Giải thích thuyết tương đối")

    assert len(chat.calls) == 1
    assert result.text == APOLOGY_TEXT
    assert result.error == "integration_failure"
    assert result.speech == "Xin lỗi, tôi đang gặp sự cố khi xử lý yêu cầu của bạn"


def test_clear_history_wins(tmp_path):
    dispatcher, _, _ = _build(tmp_path)
    dispatcher.history.add("A", "B")

    result = dispatcher.dispatch("xóa lịch sử chỉ đường")

    assert result.intent.kind == HISTORY_CLEAR
    assert dispatcher.history.load() == ()


def test_reply_is_posted_once_per_request(tmp_path):
    dispatcher, _, _ = _build(tmp_path)

    result = dispatcher.dispatch("mấy giờ rồi", request_id="r1")

    own = [m for m in dispatcher.session.messages() if m["request_id"] == "r1"]
    assert [m["is_user"] for m in own] == [True, False]
    assert own[1]["id"] == result.message_id


def test_reusing_a_request_id_is_rejected(tmp_path):
    dispatcher, _, _ = _build(tmp_path)
    dispatcher.dispatch("mấy giờ rồi", request_id="same")
    with pytest.raises(ValueError):
        dispatcher.dispatch("mấy giờ rồi", request_id="same")


def test_seen_request_ids_are_bounded(tmp_path):
    dispatcher, _, _ = _build(tmp_path, seen_limit=2)
    dispatcher.dispatch("mấy giờ rồi", request_id="r1")
    dispatcher.dispatch("mấy giờ rồi", request_id="r2")
    with pytest.raises(ValueError):
        dispatcher.dispatch("mấy giờ rồi", request_id="r1")

    dispatcher.dispatch("mấy giờ rồi", request_id="r3")
    result = dispatcher.dispatch("mấy giờ rồi", request_id="r1")
    assert result.request_id == "r1"


def test_requests_keep_their_own_overlays(tmp_path):
    places = {"A": START, "B": END, "C": END}
    dispatcher, _, _ = _build(tmp_path, places=places)

    dispatcher.dispatch("từ A đến B", request_id="first")
    dispatcher.dispatch("từ A đến C", request_id="second")

    session = dispatcher.session
    assert session.overlay("first").end_name == "B"
    assert session.overlay("second").end_name == "C"
    assert session.overlay("first").route == (START, END)
    assert session.state.active_overlay_id == "second"


def test_status_is_processing_while_a_tool_runs(tmp_path):
    session = ConversationSession()
    registry = ToolRegistry()
    started = threading.Event()
    release = threading.Event()
    seen = {}

    def slow_time_tool(payload, *, request_id):
        started.set()
        release.wait(timeout=5)
        return ToolOutcome(text="ok")

    registry.register_tool("time_query", slow_time_tool)
    dispatcher = CommandDispatcher(registry, session)
    assert dispatcher.status == IDLE

    worker = threading.Thread(target=lambda: dispatcher.dispatch("mấy giờ rồi", request_id="slow"))
    worker.start()
    assert started.wait(timeout=5)
    seen["status"] = dispatcher.status
    seen["in_flight"] = dispatcher.in_flight()
    release.set()
    worker.join(timeout=5)

    assert seen == {"status": PROCESSING, "in_flight": ["slow"]}
    assert dispatcher.status == IDLE


def test_crashing_tool_still_returns_a_reply(tmp_path):
    registry = ToolRegistry()

    def broken(payload, *, request_id):
        raise RuntimeError("boom")

    registry.register_tool("time_query", broken)
    dispatcher = CommandDispatcher(registry, ConversationSession())

    result = dispatcher.dispatch("mấy giờ rồi")

    assert result.error == "integration_failure"
    assert result.text
    assert dispatcher.status == IDLE


def test_replay_history_runs_directions_again(tmp_path):
    dispatcher, _, _ = _build(tmp_path, places={"Hồ Gươm": START, "Ngã Tư Sở": END})
    record = dispatcher.history.add("Hồ Gươm", "Ngã Tư Sở")

    result = dispatcher.replay_history(record.id)

    assert result.intent.kind == DIRECTIONS
    assert result.error is None
    assert result.intent.payload["start"] == "Hồ Gươm"
    assert dispatcher.replay_history("missing") is None


def test_turns_are_logged(tmp_path):
    log_path = tmp_path / "turns.jsonl"
    dispatcher, _, _ = _build(tmp_path, turn_logger=TurnLogger(turn_log_path=log_path, enabled=True))

    result = dispatcher.dispatch("tìm kiếm bún chả")

    rows = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert len(rows) == 1
    assert rows[0]["request_id"] == result.request_id
    assert rows[0]["intent"] == "search"
    assert rows[0]["status"] == "handled"
    assert rows[0]["user_text"] == "tìm kiếm bún chả"
