"""Helper utilities for JSON-based persistence.

Route history and the alarm store share a simple file-backed storage pattern:
a JSON list of records, rewritten whole on every change. These helpers keep
the atomic write and the corrupt-file recovery in one place so a different
key-value backend can replace them without touching the stores.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def read_json(path: Path, default: T) -> T:
    """Return JSON content from ``path`` or ``default`` when the file is absent or blank."""

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    if not raw.strip():
        return default
    return json.loads(raw)


def read_record_list(path: Path) -> List[Dict[str, Any]]:
    """Return the dict entries of the JSON list at ``path``.

    A missing, corrupt, or non-list file reads as empty so the next save
    starts the store over instead of failing every request.
    """

    try:
        raw = read_json(path, [])
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("%s is not valid UTF-8 JSON; starting empty", path)
        return []
    if not isinstance(raw, list):
        logger.warning("%s does not hold a JSON list; starting empty", path)
        return []
    return [item for item in raw if isinstance(item, dict)]


def atomic_write_json(path: Path, payload: Any) -> None:
    """Persist ``payload`` to ``path`` atomically, keeping Vietnamese text readable."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp_path, path)


def remove_json(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return


__all__ = ["atomic_write_json", "read_json", "read_record_list", "remove_json"]
