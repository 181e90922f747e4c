"""Chat fallback tool: show a "thinking" placeholder, then the model's answer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol

from core.conversation_state import ConversationSession
from core.errors import IntegrationFailure
from core.text_utils import speech_excerpt
from core.tool_registry import ToolOutcome

logger = logging.getLogger(__name__)

LOADING_TEXT = "Đang xử lý câu hỏi của bạn..."
APOLOGY_TEXT = "Xin lỗi, tôi đang gặp sự cố khi xử lý yêu cầu của bạn. Vui lòng thử lại sau."
APOLOGY_SPEECH = "Xin lỗi, tôi đang gặp sự cố khi xử lý yêu cầu của bạn"


class ChatBackend(Protocol):
    def send_message(self, text: str) -> str:
        ...


class ChatTool:
    def __init__(self, backend: ChatBackend, session: ConversationSession) -> None:
        self._backend = backend
        self._session = session

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        message = str(payload.get("message") or "")
        placeholder = self._session.post(LOADING_TEXT, request_id=request_id, is_loading=True)
        try:
            reply = self._backend.send_message(message)
        except IntegrationFailure as exc:
            logger.warning("Chat fallback failed: %s", exc.detail or exc.message)
            self._session.revise(placeholder.id, text=APOLOGY_TEXT, is_loading=False)
            return ToolOutcome(
                text=APOLOGY_TEXT,
                error=exc.code,
                message_id=placeholder.id,
                speech=APOLOGY_SPEECH,
            )

        self._session.revise(placeholder.id, text=reply, is_loading=False)
        return ToolOutcome(text=reply, message_id=placeholder.id, speech=speech_excerpt(reply))


__all__ = ["APOLOGY_TEXT", "ChatBackend", "ChatTool", "LOADING_TEXT"]
