"""Structured JSONL log of dispatched turns.

The dispatcher calls ``TurnLogger.log_turn`` once per utterance with a
``TurnRecord`` describing which matcher fired, how the request ended, and how
long it took. Records are dataclasses so the schema lives in code while the
file stays plain newline-delimited JSON.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, IO


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class TurnRecord:
    """Schema for a single dispatched utterance."""

    timestamp: str
    request_id: str
    user_text: str
    intent: str
    status: str
    payload: Dict[str, Any] = field(default_factory=dict)
    response_text: str = ""
    error: str | None = None
    latency_ms: int | None = None
    summary: Dict[str, Any] | None = None

    @classmethod
    def new(
        cls,
        *,
        request_id: str,
        user_text: str,
        intent: str,
        status: str,
        payload: Dict[str, Any] | None = None,
        response_text: str = "",
        error: str | None = None,
        latency_ms: int | None = None,
        summary: Dict[str, Any] | None = None,
    ) -> "TurnRecord":
        """Stamp the record with the current UTC time."""

        return cls(
            timestamp=_utc_now(),
            request_id=request_id,
            user_text=user_text,
            intent=intent,
            status=status,
            payload=payload or {},
            response_text=response_text,
            error=error,
            latency_ms=latency_ms,
            summary=summary,
        )


class TurnLogger:
    """JSONL writer with optional size-based rotation."""

    def __init__(
        self,
        *,
        turn_log_path: Path,
        enabled: bool = True,
        max_bytes: int = 0,
        backup_count: int = 0,
    ) -> None:
        self._turn_log_path = turn_log_path
        self._enabled = enabled
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log_turn(self, record: TurnRecord) -> None:
        if not self._enabled:
            return
        self._append_json_line(self._turn_log_path, asdict(record))

    def _append_json_line(self, path: Path, payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(payload, ensure_ascii=False, default=str)
        encoded = line.encode("utf-8")
        self._rotate_if_needed(path, len(encoded) + 1)
        with self._open_file(path) as handle:
            handle.write(line)
            handle.write("\n")

    @staticmethod
    def _open_file(path: Path) -> IO[str]:
        return path.open("a", encoding="utf-8")

    def _rotate_if_needed(self, path: Path, incoming_bytes: int) -> None:
        """Shift ``turns.jsonl`` to numbered backups once it would exceed ``max_bytes``."""
        if self._max_bytes <= 0:
            return
        if not path.exists():
            return

        current_size = path.stat().st_size
        if current_size + incoming_bytes <= self._max_bytes:
            return

        if self._backup_count <= 0:
            path.unlink()
            return

        for index in range(self._backup_count - 1, 0, -1):
            src = Path(f"{path}.{index}")
            dst = Path(f"{path}.{index + 1}")
            if src.exists():
                src.replace(dst)

        rotated = Path(f"{path}.1")
        if rotated.exists():
            rotated.unlink()
        path.replace(rotated)


__all__ = ["TurnLogger", "TurnRecord"]
