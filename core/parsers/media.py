"""Video/music intent parsing."""

from __future__ import annotations

import re
from typing import Optional

from core.parser_utils import extract_trailing_span
from core.parsers.types import MEDIA, Intent

_MEDIA_PATTERN = re.compile(
    r"(?P<verb>mở|tìm|phát|nghe|xem)\s+(?P<kind>bài hát|video|nhạc|youtube|clip)\s+(?P<query>.+)",
    re.IGNORECASE,
)


def matches(lowered: str) -> bool:
    return bool(_MEDIA_PATTERN.search(lowered))


def parse(message: str, lowered: str) -> Optional[Intent]:
    """Extract the title after phrases like "mở bài hát" or "xem video"."""
    match = _MEDIA_PATTERN.search(message)
    if not match:
        return None
    query = extract_trailing_span(message, _MEDIA_PATTERN, "query")
    if not query:
        return None
    payload = {
        "message": message,
        "query": query,
        "media_type": match.group("kind").lower(),
    }
    return Intent(kind=MEDIA, payload=payload)


__all__ = ["matches", "parse"]
