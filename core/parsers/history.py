"""Route-history intent parsing."""

from __future__ import annotations

from typing import Optional

from core.parser_utils import contains_keyword
from core.parsers.types import HISTORY_CLEAR, HISTORY_QUERY, Intent

CLEAR_KEYWORDS = ("xóa lịch sử", "xoá lịch sử")
QUERY_KEYWORDS = ("lịch sử tìm kiếm", "lịch sử bản đồ", "lịch sử")


def matches(lowered: str) -> bool:
    return contains_keyword(lowered, CLEAR_KEYWORDS) or contains_keyword(lowered, QUERY_KEYWORDS)


def parse(message: str, lowered: str) -> Optional[Intent]:
    """Clearing wins over listing whenever both phrasings are present."""
    if contains_keyword(lowered, CLEAR_KEYWORDS):
        return Intent(kind=HISTORY_CLEAR, payload={"message": message})
    if contains_keyword(lowered, QUERY_KEYWORDS):
        return Intent(kind=HISTORY_QUERY, payload={"message": message})
    return None


__all__ = ["matches", "parse", "CLEAR_KEYWORDS", "QUERY_KEYWORDS"]
