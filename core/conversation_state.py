"""Conversation log and map overlays as immutable snapshots.

Every change goes through a small reducer that returns a new
``ConversationState``. ``ConversationSession`` owns the current snapshot and
applies reducers one at a time, so concurrent requests only ever touch the
message or overlay that carries their own id.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from core.geo import Coordinate, RoutePath

GREETING = "Xin chào! Tôi có thể giúp gì cho bạn?"


@dataclass(frozen=True)
class ChatMessage:
    id: str
    text: str
    is_user: bool
    timestamp: str
    request_id: Optional[str] = None
    show_map: bool = False
    is_loading: bool = False

    @classmethod
    def new(cls, text: str, *, is_user: bool, request_id: Optional[str] = None, **flags: Any) -> "ChatMessage":
        return cls(
            id=uuid4().hex,
            text=text,
            is_user=is_user,
            timestamp=datetime.now().replace(microsecond=0).isoformat(),
            request_id=request_id,
            **flags,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "text": self.text,
            "is_user": self.is_user,
            "timestamp": self.timestamp,
            "request_id": self.request_id,
            "show_map": self.show_map,
            "is_loading": self.is_loading,
        }


@dataclass(frozen=True)
class MapOverlay:
    request_id: str
    start_name: str
    end_name: str
    start: Optional[Coordinate] = None
    end: Optional[Coordinate] = None
    route: Optional[RoutePath] = None
    distance_km: Optional[float] = None
    maps_url: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "request_id": self.request_id,
            "start_name": self.start_name,
            "end_name": self.end_name,
            "start": self.start.to_dict() if self.start else None,
            "end": self.end.to_dict() if self.end else None,
            "route": [point.to_dict() for point in self.route] if self.route else None,
            "distance_km": self.distance_km,
            "maps_url": self.maps_url,
        }


@dataclass(frozen=True)
class ConversationState:
    messages: Tuple[ChatMessage, ...] = ()
    overlays: Mapping[str, MapOverlay] = field(default_factory=dict)
    active_overlay_id: Optional[str] = None


# --- Reducers ---------------------------------------------------------------
def append_message(state: ConversationState, message: ChatMessage) -> ConversationState:
    return replace(state, messages=state.messages + (message,))


def update_message(state: ConversationState, message_id: str, **changes: Any) -> ConversationState:
    """Replace one message by id; unknown ids leave the state untouched."""
    if not any(message.id == message_id for message in state.messages):
        return state
    messages = tuple(replace(message, **changes) if message.id == message_id else message for message in state.messages)
    return replace(state, messages=messages)


def put_overlay(state: ConversationState, overlay: MapOverlay, *, activate: bool = False) -> ConversationState:
    overlays = dict(state.overlays)
    overlays[overlay.request_id] = overlay
    active = overlay.request_id if activate else state.active_overlay_id
    return replace(state, overlays=overlays, active_overlay_id=active)


def update_overlay(state: ConversationState, request_id: str, **changes: Any) -> ConversationState:
    current = state.overlays.get(request_id)
    if current is None:
        return state
    return put_overlay(state, replace(current, **changes))


# --- Session owner ----------------------------------------------------------
class ConversationSession:
    """Holds the current ``ConversationState`` and applies reducers under a lock."""

    def __init__(self, state: Optional[ConversationState] = None, *, greeting: Optional[str] = None) -> None:
        initial = state or ConversationState()
        if greeting and not initial.messages:
            initial = append_message(initial, ChatMessage.new(greeting, is_user=False))
        self._state = initial
        self._lock = threading.Lock()

    @property
    def state(self) -> ConversationState:
        return self._state

    def apply(self, reducer: Callable[..., ConversationState], *args: Any, **kwargs: Any) -> ConversationState:
        with self._lock:
            self._state = reducer(self._state, *args, **kwargs)
            return self._state

    # WHAT: append a user or assistant message and hand it back to the caller.
    # WHY: the dispatcher needs the message id to revise placeholder text later.
    # HOW: build a `ChatMessage` and apply the `append_message` reducer.
    def post(self, text: str, *, is_user: bool = False, request_id: Optional[str] = None, **flags: Any) -> ChatMessage:
        message = ChatMessage.new(text, is_user=is_user, request_id=request_id, **flags)
        self.apply(append_message, message)
        return message

    def revise(self, message_id: str, **changes: Any) -> None:
        self.apply(update_message, message_id, **changes)

    def put_overlay(self, overlay: MapOverlay, *, activate: bool = False) -> None:
        self.apply(put_overlay, overlay, activate=activate)

    def update_overlay(self, request_id: str, **changes: Any) -> None:
        self.apply(update_overlay, request_id, **changes)

    def overlay(self, request_id: str) -> Optional[MapOverlay]:
        return self._state.overlays.get(request_id)

    def message(self, message_id: str) -> Optional[ChatMessage]:
        for message in self._state.messages:
            if message.id == message_id:
                return message
        return None

    def messages(self) -> List[Dict[str, object]]:
        return [message.to_dict() for message in self._state.messages]


__all__ = [
    "ChatMessage",
    "ConversationSession",
    "ConversationState",
    "GREETING",
    "MapOverlay",
    "append_message",
    "put_overlay",
    "update_message",
    "update_overlay",
]
