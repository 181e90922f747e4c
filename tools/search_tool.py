"""Web and video search tools that hand a URL to the host's link opener."""

from __future__ import annotations

import logging
import webbrowser
from typing import Any, Callable, Dict, List
from urllib.parse import quote, quote_plus

from core.errors import IntegrationFailure
from core.tool_registry import ToolOutcome

logger = logging.getLogger(__name__)

LinkOpener = Callable[[str], bool]


def open_in_browser(url: str) -> bool:
    return webbrowser.open(url)


def build_google_search_url(query: str) -> str:
    return f"https://www.google.com/search?q={quote_plus(query)}"


def build_youtube_urls(query: str) -> List[str]:
    """Candidate links, app schemes first and the browser page last."""
    encoded = quote(query)
    return [
        f"youtube://www.youtube.com/results?search_query={encoded}&autoplay=1",
        f"vnd.youtube:///results?search_query={encoded}&autoplay=1",
        f"https://www.youtube.com/results?search_query={encoded}&autoplay=1",
    ]


def _open(opener: LinkOpener, url: str) -> None:
    try:
        opened = opener(url)
    except Exception as exc:  # host/browser errors
        raise IntegrationFailure("Could not open link", detail=str(exc)) from exc
    if opened is False:
        raise IntegrationFailure("Link opener refused the URL", detail=url)


class WebSearchTool:
    def __init__(self, opener: LinkOpener = open_in_browser) -> None:
        self._opener = opener

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        query = str(payload.get("query") or "").strip()
        url = build_google_search_url(query)
        summary = {"query": query, "url": url}
        try:
            _open(self._opener, url)
        except IntegrationFailure as exc:
            logger.warning("Opening Google search failed: %s", exc.detail or exc.message)
            return ToolOutcome(
                text=f'Không thể mở Google để tìm kiếm "{query}".',
                summary=summary,
                error=exc.code,
            )
        return ToolOutcome(
            text=f'Đang mở Google tìm kiếm "{query}"...',
            summary=summary,
            speech=f"Đang mở Google tìm kiếm {query}",
        )


class MediaSearchTool:
    """Opens YouTube results, trying the app links before the browser page."""

    def __init__(self, opener: LinkOpener = open_in_browser, *, browser_only: bool = True) -> None:
        self._opener = opener
        self._browser_only = browser_only

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        query = str(payload.get("query") or "").strip()
        candidates = build_youtube_urls(query)
        if self._browser_only:
            candidates = candidates[-1:]
        summary: Dict[str, Any] = {"query": query, "candidates": candidates}

        last_error: IntegrationFailure | None = None
        for url in candidates:
            try:
                _open(self._opener, url)
            except IntegrationFailure as exc:
                last_error = exc
                continue
            summary["url"] = url
            return ToolOutcome(
                text=f'Đang mở video "{query}" trên YouTube...',
                summary=summary,
                speech=f"Đang mở video {query} trên YouTube",
            )

        logger.warning("Opening YouTube failed for %r: %s", query, last_error.detail if last_error else "")
        return ToolOutcome(
            text=f'Không thể mở YouTube để tìm "{query}".',
            summary=summary,
            error=IntegrationFailure.code,
        )


__all__ = [
    "LinkOpener",
    "MediaSearchTool",
    "WebSearchTool",
    "build_google_search_url",
    "build_youtube_urls",
    "open_in_browser",
]
