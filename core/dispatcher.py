"""Turn one utterance into one action and one reply.

The dispatcher is the single entry point for user input: it classifies the
utterance with the ordered pattern matchers in ``core.command_parser``, runs
the tool registered for the resulting intent, and hands anything the matchers
do not claim to the chat fallback. Every request carries its own id, which is
also the key for any message or map overlay the request writes, so two
requests in flight never overwrite each other's progress.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Dict, List, Optional
from uuid import uuid4

from core.command_parser import parse_command
from core.conversation_state import ConversationSession
from core.errors import AssistantError, IntegrationFailure
from core.parsers.types import CHAT, Intent
from core.route_history import RouteHistoryStore
from core.text_utils import speech_excerpt
from core.tool_registry import ToolOutcome, ToolRegistry
from core.turn_logger import TurnLogger, TurnRecord

logger = logging.getLogger(__name__)

IDLE = "idle"
PROCESSING = "processing"
HANDLED = "handled"
UNHANDLED = "unhandled"
DEFAULT_SEEN_LIMIT = 4096

FALLBACK_ERROR_TEXT = "Xin lỗi, tôi đang gặp sự cố khi xử lý yêu cầu của bạn. Vui lòng thử lại sau."


@dataclass
class DispatchResult:
    """Outcome of a single dispatched utterance.

    ``status`` is ``handled`` when a matcher claimed the utterance and
    ``unhandled`` when it went to the chat fallback instead.
    """

    request_id: str
    status: str
    intent: Intent
    text: str
    speech: str = ""
    summary: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    message_id: Optional[str] = None
    latency_ms: int = 0

    @property
    def handled(self) -> bool:
        return self.status == HANDLED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "status": self.status,
            "intent": self.intent.to_dict(),
            "text": self.text,
            "speech": self.speech,
            "summary": self.summary,
            "error": self.error,
            "message_id": self.message_id,
            "latency_ms": self.latency_ms,
        }


class CommandDispatcher:
    """Coordinates matchers, tools, the chat fallback, and the conversation log."""

    def __init__(
        self,
        registry: ToolRegistry,
        session: ConversationSession,
        *,
        history: Optional[RouteHistoryStore] = None,
        turn_logger: Optional[TurnLogger] = None,
        seen_limit: int = DEFAULT_SEEN_LIMIT,
    ) -> None:
        self._registry = registry
        self._session = session
        self._history = history
        self._turn_logger = turn_logger
        self._lock = threading.Lock()
        self._in_flight: Dict[str, str] = {}
        # Recent request ids, oldest first; ids older than the window may be reused.
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        self._seen_limit = max(1, seen_limit)

    @property
    def session(self) -> ConversationSession:
        return self._session

    @property
    def history(self) -> Optional[RouteHistoryStore]:
        return self._history

    @property
    def status(self) -> str:
        """``processing`` while any request is still resolving, else ``idle``."""
        with self._lock:
            return PROCESSING if self._in_flight else IDLE

    def in_flight(self) -> List[str]:
        with self._lock:
            return list(self._in_flight)

    # WHAT: classify the utterance, run its tool, and return one result.
    # WHY: callers (CLI, web API) need a reply even when a collaborator fails.
    # HOW: mark the request processing, post the user message, route through the
    # registry, catch every failure at this boundary, then log the turn.
    def dispatch(self, utterance: str, *, request_id: Optional[str] = None) -> DispatchResult:
        request_id = request_id or uuid4().hex
        text = (utterance or "").strip()
        self._begin(request_id, text)
        started = perf_counter()
        try:
            if text:
                self._session.post(text, is_user=True, request_id=request_id)
            intent = parse_command(text)
            status = HANDLED
            if intent is None:
                intent = Intent(kind=CHAT, payload={"message": text})
                status = UNHANDLED

            outcome = self._run(intent, request_id)
            if outcome.message_id is None:
                posted = self._session.post(outcome.text, request_id=request_id)
                outcome.message_id = posted.id

            result = DispatchResult(
                request_id=request_id,
                status=status,
                intent=intent,
                text=outcome.text,
                speech=outcome.speech if outcome.speech is not None else speech_excerpt(outcome.text),
                summary=outcome.summary,
                error=outcome.error,
                message_id=outcome.message_id,
                latency_ms=int((perf_counter() - started) * 1000),
            )
        finally:
            self._finish(request_id)
        self._log_turn(text, result)
        return result

    def replay_history(self, record_id: str) -> Optional[DispatchResult]:
        """Run a stored route search again as a fresh directions request."""
        if self._history is None:
            return None
        record = self._history.find(record_id)
        if record is None:
            return None
        return self.dispatch(f"đường đi từ {record.start} đến {record.end}")

    def _run(self, intent: Intent, request_id: str) -> ToolOutcome:
        try:
            return self._registry.run_tool(intent.kind, dict(intent.payload), request_id=request_id)
        except AssistantError as exc:
            logger.warning("Tool %s reported %s: %s", intent.kind, exc.code, exc.message)
            return ToolOutcome(text=FALLBACK_ERROR_TEXT, error=exc.code, summary={"failure": exc.to_metadata()})
        except Exception:
            logger.exception("Tool %s crashed while handling request %s", intent.kind, request_id)
            return ToolOutcome(text=FALLBACK_ERROR_TEXT, error=IntegrationFailure.code)

    def _begin(self, request_id: str, text: str) -> None:
        with self._lock:
            if request_id in self._seen:
                raise ValueError(f"Request '{request_id}' was already dispatched")
            self._seen[request_id] = None
            while len(self._seen) > self._seen_limit:
                self._seen.popitem(last=False)
            self._in_flight[request_id] = text

    def _finish(self, request_id: str) -> None:
        with self._lock:
            self._in_flight.pop(request_id, None)

    def _log_turn(self, user_text: str, result: DispatchResult) -> None:
        if not self._turn_logger or not self._turn_logger.enabled:
            return
        record = TurnRecord.new(
            request_id=result.request_id,
            user_text=user_text,
            intent=result.intent.kind,
            status=result.status,
            payload=dict(result.intent.payload),
            response_text=result.text,
            error=result.error,
            latency_ms=result.latency_ms,
            summary=result.summary,
        )
        try:
            self._turn_logger.log_turn(record)
        except OSError as exc:
            logger.warning("Could not write turn log: %s", exc)


__all__ = [
    "CommandDispatcher",
    "DispatchResult",
    "HANDLED",
    "IDLE",
    "PROCESSING",
    "UNHANDLED",
]
