"""Register the built-in command tools with the shared registry.

Each intent kind produced by ``core.command_parser`` (plus the ``chat``
fallback) maps to exactly one tool. This module centralises their
registration so the dispatcher, the CLI, and the web API share a single
source of truth.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Sequence, Tuple

from core.conversation_state import ConversationSession
from core.parser_utils.datetime import DEFAULT_PM_MARKERS
from core.parsers.directions import DEFAULT_END, DEFAULT_START
from core.parsers.types import (
    ALARM,
    CHAT,
    DIRECTIONS,
    HISTORY_CLEAR,
    HISTORY_QUERY,
    MEDIA,
    SEARCH,
    TIME_QUERY,
)
from core.route_history import RouteHistoryStore
from core.tool_registry import ToolRegistry
from tools.alarm_tool import AlarmScheduler, AlarmTool
from tools.chat_tool import ChatBackend, ChatTool
from tools.directions_tool import DirectionsTool, GeoRoutingPipeline
from tools.history_tool import HistoryClearTool, HistoryQueryTool
from tools.search_tool import LinkOpener, MediaSearchTool, WebSearchTool, open_in_browser
from tools.time_tool import TimeQueryTool


def load_all_core_tools(
    registry: ToolRegistry,
    *,
    session: ConversationSession,
    history: RouteHistoryStore,
    pipeline: GeoRoutingPipeline,
    chat_backend: ChatBackend,
    schedulers: Sequence[AlarmScheduler] = (),
    opener: LinkOpener = open_in_browser,
    pm_markers: Iterable[str] = DEFAULT_PM_MARKERS,
    default_route: Tuple[str, str] = (DEFAULT_START, DEFAULT_END),
    clock: Callable[[], datetime] = datetime.now,
) -> None:
    # Register every core tool with ``registry``
    registry.register_tool(HISTORY_QUERY, HistoryQueryTool(history))
    registry.register_tool(HISTORY_CLEAR, HistoryClearTool(history))
    registry.register_tool(SEARCH, WebSearchTool(opener))
    registry.register_tool(MEDIA, MediaSearchTool(opener))
    registry.register_tool(ALARM, AlarmTool(schedulers, pm_markers=pm_markers, clock=clock))
    registry.register_tool(DIRECTIONS, DirectionsTool(pipeline, session, history, default_route=default_route))
    registry.register_tool(TIME_QUERY, TimeQueryTool(clock))
    registry.register_tool(CHAT, ChatTool(chat_backend, session))


__all__ = ["load_all_core_tools"]
