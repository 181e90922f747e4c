"""Directions intent parsing."""

from __future__ import annotations

import re
from typing import Dict, Optional

from core.parser_utils import contains_keyword
from core.parser_utils.text import strip_trailing_punctuation
from core.parsers.types import DIRECTIONS, Intent

DIRECTIONS_KEYWORDS = ("chỉ đường", "đường đi", "làm sao để đi")
DEFAULT_START = "Hồ Gươm, Hà Nội"
DEFAULT_END = "Ngã Tư Sở, Hà Nội"

_FROM_TO_PATTERN = re.compile(r"(?<!\w)từ\s+(?P<start>.+?)\s+đến\s+(?P<end>.+)", re.IGNORECASE)


# WHAT: detect directions keywords or an explicit "từ X đến Y" phrase.
# WHY: spoken requests often drop the verb and only name the two places.
# HOW: keyword scan first, then the from/to pattern on the lowered text.
def matches(lowered: str) -> bool:
    return contains_keyword(lowered, DIRECTIONS_KEYWORDS) or bool(_FROM_TO_PATTERN.search(lowered))


# WHAT: split the utterance into start/end place names.
# WHY: the routing tool geocodes each name separately.
# HOW: use the from/to span when present, else fall back to the default pair and flag it.
def parse(message: str, lowered: str) -> Optional[Intent]:
    payload: Dict[str, object] = {"message": message}
    places = extract_places(message)
    if places:
        payload["start"], payload["end"] = places
        payload["used_default"] = False
    else:
        payload["start"] = DEFAULT_START
        payload["end"] = DEFAULT_END
        payload["used_default"] = True
    return Intent(kind=DIRECTIONS, payload=payload)


def extract_places(message: str) -> Optional[tuple[str, str]]:
    match = _FROM_TO_PATTERN.search(message)
    if not match:
        return None
    start = strip_trailing_punctuation(match.group("start"))
    end = strip_trailing_punctuation(match.group("end"))
    if not start or not end:
        return None
    return start, end


__all__ = ["matches", "parse", "extract_places", "DEFAULT_START", "DEFAULT_END", "DIRECTIONS_KEYWORDS"]
