from datetime import datetime

from core.conversation_state import ConversationSession
from core.errors import IntegrationFailure
from tools.chat_tool import APOLOGY_TEXT, ChatTool
from tools.time_tool import TimeQueryTool, format_current_time


class StubBackend:
    def __init__(self, reply=None, error=None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[str] = []

    def send_message(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.reply


def test_format_current_time():
    assert format_current_time(datetime(2024, 5, 1, 9, 5, 7)) == "Bây giờ là 09:05:07, ngày 01/05/2024"


def test_time_tool_uses_injected_clock():
    outcome = TimeQueryTool(lambda: datetime(2024, 5, 1, 21, 0, 0))({}, request_id="r1")
    assert outcome.text == "Bây giờ là 21:00:00, ngày 01/05/2024"
    assert outcome.summary["now"] == "2024-05-01T21:00:00"


def test_chat_tool_replaces_placeholder_with_reply():
    session = ConversationSession()
    backend = StubBackend(reply="Hà Nội là thủ đô của Việt Nam.")

    outcome = ChatTool(backend, session)({"message": "Thủ đô Việt Nam?"}, request_id="r1")

    assert backend.calls == ["Thủ đô Việt Nam?"]
    message = session.message(outcome.message_id)
    assert message.text == "Hà Nội là thủ đô của Việt Nam."
    assert message.is_loading is False
    assert len(session.state.messages) == 1


def test_chat_tool_apologises_on_backend_failure():
    session = ConversationSession()
    backend = StubBackend(error=IntegrationFailure("down"))

    outcome = ChatTool(backend, session)({"message": "hi"}, request_id="r1")

    assert outcome.error == "integration_failure"
    assert outcome.text == APOLOGY_TEXT
    assert session.message(outcome.message_id).text == APOLOGY_TEXT
