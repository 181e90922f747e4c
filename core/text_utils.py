"""Shared text helpers for replies."""

from __future__ import annotations

SPEECH_MAX_CHARS = 200


def speech_excerpt(text: str, *, max_chars: int = SPEECH_MAX_CHARS, sentences: int = 2) -> str:
    """Return the part of a reply worth reading aloud.

    Short replies are spoken whole; longer ones are cut to their first
    ``sentences`` sentences.
    """

    value = " ".join((text or "").split())
    if len(value) < max_chars:
        return value
    head = ". ".join(value.split(". ")[:sentences]).rstrip(".")
    return f"{head}."


__all__ = ["speech_excerpt", "SPEECH_MAX_CHARS"]
