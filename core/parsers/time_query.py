"""Current-time question parsing."""

from __future__ import annotations

from typing import Optional

from core.parser_utils import contains_keyword
from core.parsers.types import TIME_QUERY, Intent

TIME_QUERY_KEYWORDS = ("mấy giờ", "thời gian", "what time")


def matches(lowered: str) -> bool:
    return contains_keyword(lowered, TIME_QUERY_KEYWORDS)


def parse(message: str, lowered: str) -> Optional[Intent]:
    return Intent(kind=TIME_QUERY, payload={"message": message})


__all__ = ["matches", "parse", "TIME_QUERY_KEYWORDS"]
