"""Common text-processing helpers shared across parser modules."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Optional, Pattern


def normalize_utterance(text: str) -> str:
    """Return the NFC-normalized, whitespace-collapsed, lower-cased form of ``text``.

    Vietnamese input arrives both precomposed and decomposed depending on the
    keyboard or transcriber, so keyword checks compare NFC strings only.
    """

    composed = unicodedata.normalize("NFC", text or "")
    return " ".join(composed.split()).lower()


def clean_utterance(text: str) -> str:
    """NFC + whitespace cleanup that keeps the original casing for payloads."""

    composed = unicodedata.normalize("NFC", text or "")
    return " ".join(composed.split())


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    """Return True when any keyword is present in ``text``."""

    return any(keyword in text for keyword in keywords)


def extract_trailing_span(message: str, pattern: Pattern[str], group: int | str) -> Optional[str]:
    """Return the stripped ``group`` of the first ``pattern`` match, or None when empty."""

    match = pattern.search(message)
    if not match:
        return None
    value = (match.group(group) or "").strip().strip(" \"'.,!?")
    return value or None


def strip_trailing_punctuation(value: str) -> str:
    return re.sub(r"[\s.,!?;:]+$", "", value or "").strip()


__all__ = [
    "clean_utterance",
    "contains_keyword",
    "extract_trailing_span",
    "normalize_utterance",
    "strip_trailing_punctuation",
]
