"""Command parser that turns one utterance into at most one intent."""

from __future__ import annotations

from typing import Optional

from core.parser_utils import clean_utterance, normalize_utterance
from core.parsers import alarm, directions, history, media, search, time_query
from core.parsers.types import Intent

# History and explicit search verbs come before the broader directions and
# time keywords, which also show up inside other phrasings.
MATCHER_ORDER = (
    ("history", history),
    ("search", search),
    ("media", media),
    ("alarm", alarm),
    ("directions", directions),
    ("time_query", time_query),
)


def parse_command(message: str) -> Optional[Intent]:
    """Try each domain parser until one claims the utterance.

    WHAT: run the pattern matchers in their fixed priority order.
    WHY: the first match wins, so the order is part of the contract; callers
    fall back to chat when this returns ``None``.
    HOW: pass both the cleaned original text (for payloads) and a lowered copy
    (for keyword guards) to every matcher.
    """
    if not message or not message.strip():
        return None
    cleaned = clean_utterance(message)
    lowered = normalize_utterance(message)

    for _name, matcher in MATCHER_ORDER:
        if not matcher.matches(lowered):
            continue
        result = matcher.parse(cleaned, lowered)
        if result:
            return result
    return None


__all__ = ["parse_command", "Intent", "MATCHER_ORDER"]
