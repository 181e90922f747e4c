"""Map intent kinds to the tools that carry out their side effects.

The dispatcher only ever runs tools registered here, one per intent kind, so
the set of actions an utterance can trigger is explicit and enumerable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol


@dataclass
class ToolOutcome:
    """What a tool did for one request.

    ``message_id`` is set when the tool already wrote (and possibly revised)
    its own assistant message, for example a placeholder that became the
    final answer; otherwise the dispatcher posts ``text`` itself.
    """

    text: str
    summary: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    message_id: Optional[str] = None
    speech: Optional[str] = None


class ToolFn(Protocol):
    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        ...


class ToolRegistry:
    """Registry that maps intent kinds to callables."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolFn] = {}

    # WHAT: register a tool callable under an intent kind.
    # WHY: the dispatcher relies on this registry to know which action handles an intent.
    # HOW: guard against duplicates and store the callable in `_tools`.
    def register_tool(self, name: str, fn: ToolFn) -> None:
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self._tools[name] = fn

    # WHAT: execute a previously registered tool.
    # WHY: the dispatcher calls this once the matcher chain resolved an intent.
    # HOW: look up the callable and invoke it with the payload and request id.
    def run_tool(self, name: str, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        try:
            tool_fn = self._tools[name]
        except KeyError as exc:
            raise KeyError(f"Tool '{name}' is not registered") from exc
        return tool_fn(payload, request_id=request_id)

    def available_tools(self) -> Dict[str, ToolFn]:
        return dict(self._tools)


__all__ = ["ToolFn", "ToolOutcome", "ToolRegistry"]
