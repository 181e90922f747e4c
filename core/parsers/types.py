"""Shared dataclasses for parser outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

ALARM = "alarm"
SEARCH = "search"
MEDIA = "media"
DIRECTIONS = "directions"
HISTORY_QUERY = "history_query"
HISTORY_CLEAR = "history_clear"
TIME_QUERY = "time_query"
CHAT = "chat"

INTENT_KINDS = (ALARM, SEARCH, MEDIA, DIRECTIONS, HISTORY_QUERY, HISTORY_CLEAR, TIME_QUERY, CHAT)


@dataclass(frozen=True)
class Intent:
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "payload": dict(self.payload)}


__all__ = [
    "ALARM",
    "CHAT",
    "DIRECTIONS",
    "HISTORY_CLEAR",
    "HISTORY_QUERY",
    "INTENT_KINDS",
    "Intent",
    "MEDIA",
    "SEARCH",
    "TIME_QUERY",
]
