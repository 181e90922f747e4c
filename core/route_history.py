"""Persistent list of recent route searches."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from core.json_storage import atomic_write_json, read_record_list, remove_json

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


@dataclass(frozen=True)
class RouteSearchRecord:
    id: str
    start: str
    end: str
    timestamp: str

    @classmethod
    def new(cls, start: str, end: str, *, now: Optional[datetime] = None) -> "RouteSearchRecord":
        stamp = (now or datetime.now()).replace(microsecond=0).isoformat()
        return cls(id=uuid4().hex, start=start.strip(), end=end.strip(), timestamp=stamp)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Optional["RouteSearchRecord"]:
        try:
            return cls(
                id=str(payload["id"]),
                start=str(payload["start"]),
                end=str(payload["end"]),
                timestamp=str(payload.get("timestamp") or ""),
            )
        except (KeyError, TypeError):
            return None

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "start": self.start, "end": self.end, "timestamp": self.timestamp}


class RouteHistoryStore:
    """JSON-file store for route searches, most recent first, capped at ``limit``.

    Records are never edited in place: callers append, read, or clear. The
    load-modify-save sequence in ``add`` runs under a lock so concurrent
    dispatches cannot drop each other's entries.
    """

    def __init__(self, path: Path, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._path = path
        self._limit = max(1, limit)
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    def load(self) -> Tuple[RouteSearchRecord, ...]:
        records = (RouteSearchRecord.from_dict(item) for item in read_record_list(self._path))
        return tuple(record for record in records if record is not None)[: self._limit]

    def save(self, records: Sequence[RouteSearchRecord]) -> None:
        trimmed = list(records)[: self._limit]
        atomic_write_json(self._path, [record.to_dict() for record in trimmed])

    def clear(self) -> None:
        with self._lock:
            remove_json(self._path)
        logger.info("Route history at %s cleared", self._path)

    def add(self, start: str, end: str) -> RouteSearchRecord:
        """Prepend a record and evict whatever falls past the cap."""
        record = RouteSearchRecord.new(start, end)
        with self._lock:
            updated: List[RouteSearchRecord] = [record, *self.load()]
            self.save(updated)
        return record

    def find(self, record_id: str) -> Optional[RouteSearchRecord]:
        for record in self.load():
            if record.id == record_id:
                return record
        return None


def format_history(records: Iterable[RouteSearchRecord]) -> str:
    lines = []
    for index, record in enumerate(records, start=1):
        lines.append(f"{index}. {record.start} → {record.end} ({_format_timestamp(record.timestamp)})")
    return "\n".join(lines)


def _format_timestamp(timestamp: str) -> str:
    try:
        value = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return value.strftime("%d/%m/%Y %H:%M")


__all__ = ["DEFAULT_HISTORY_LIMIT", "RouteHistoryStore", "RouteSearchRecord", "format_history"]
