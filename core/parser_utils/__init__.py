"""Shared helper utilities for command parsing."""

from .text import clean_utterance, contains_keyword, extract_trailing_span, normalize_utterance
from .datetime import ClockTime, parse_time_expression, resolve_alarm_datetime

__all__ = [
    "ClockTime",
    "clean_utterance",
    "contains_keyword",
    "extract_trailing_span",
    "normalize_utterance",
    "parse_time_expression",
    "resolve_alarm_datetime",
]
