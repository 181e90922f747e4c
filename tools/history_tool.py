"""Route history tools: list and clear recent directions searches."""

from __future__ import annotations

import logging
from typing import Any, Dict

from core.errors import IntegrationFailure
from core.route_history import RouteHistoryStore, format_history
from core.tool_registry import ToolOutcome

logger = logging.getLogger(__name__)

EMPTY_HISTORY_TEXT = "Bạn chưa có lịch sử tìm kiếm bản đồ nào."
CLEARED_TEXT = "Đã xóa lịch sử tìm kiếm bản đồ"


class HistoryQueryTool:
    def __init__(self, store: RouteHistoryStore) -> None:
        self._store = store

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        records = self._store.load()
        if not records:
            return ToolOutcome(text=EMPTY_HISTORY_TEXT, summary={"count": 0}, speech=EMPTY_HISTORY_TEXT)
        text = "Lịch sử tìm kiếm bản đồ:\n" + format_history(records)
        return ToolOutcome(
            text=text,
            summary={"count": len(records), "records": [record.to_dict() for record in records]},
            speech=f"Bạn có {len(records)} tìm kiếm gần đây",
        )


class HistoryClearTool:
    def __init__(self, store: RouteHistoryStore) -> None:
        self._store = store

    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        try:
            self._store.clear()
        except OSError as exc:
            logger.warning("Clearing route history failed: %s", exc)
            return ToolOutcome(
                text="Không thể xóa lịch sử tìm kiếm bản đồ. Vui lòng thử lại sau.",
                error=IntegrationFailure.code,
            )
        return ToolOutcome(text=CLEARED_TEXT, summary={"cleared": True}, speech=CLEARED_TEXT)


__all__ = ["CLEARED_TEXT", "EMPTY_HISTORY_TEXT", "HistoryClearTool", "HistoryQueryTool"]
