"""Web-search intent parsing."""

from __future__ import annotations

import re
from typing import Optional

from core.parser_utils import extract_trailing_span
from core.parsers.types import SEARCH, Intent

_SEARCH_PATTERN = re.compile(r"(?<!\w)(?:tìm kiếm|tìm|search|google)\s+(?P<query>.+)", re.IGNORECASE)


# WHAT: cheap guard so the dispatcher skips the regex for unrelated prompts.
# WHY: most chat turns never mention a search verb.
# HOW: run the same pattern against the lowered text.
def matches(lowered: str) -> bool:
    return bool(_SEARCH_PATTERN.search(lowered))


# WHAT: build a search intent whose query is everything after the search verb.
# WHY: the browser opener only needs the free-text span.
# HOW: search the original text so casing survives into the query.
def parse(message: str, lowered: str) -> Optional[Intent]:
    query = extract_trailing_span(message, _SEARCH_PATTERN, "query")
    if not query:
        return None
    return Intent(kind=SEARCH, payload={"message": message, "query": query})


__all__ = ["matches", "parse"]
