"""Domain-specific command parsers."""

from . import alarm, directions, history, media, search, time_query

__all__ = ["alarm", "directions", "history", "media", "search", "time_query"]
