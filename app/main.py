"""Assemble the dispatcher and run the interactive CLI loop."""

from __future__ import annotations

import logging

from app.config import (
    get_alarm_store_path,
    get_chat_history_turns,
    get_chat_model,
    get_default_route,
    get_geocoder_url,
    get_history_limit,
    get_history_path,
    get_http_timeout,
    get_llm_api_key,
    get_log_backup_count,
    get_log_level,
    get_log_max_bytes,
    get_pm_markers,
    get_route_profile,
    get_router_url,
    get_turn_log_path,
    is_logging_enabled,
)
from core import http
from core.chat_client import ChatClient
from core.conversation_state import GREETING, ConversationSession
from core.dispatcher import CommandDispatcher
from core.route_history import RouteHistoryStore
from core.tool_registry import ToolRegistry
from core.turn_logger import TurnLogger
from tools import load_all_core_tools
from tools.alarm_tool import JsonAlarmScheduler
from tools.directions_tool import GeoRoutingPipeline


# -- Dispatcher construction ---------------------------------------------------
def build_dispatcher() -> CommandDispatcher:
    """Wire up the matcher pipeline for the CLI and the web API.

    WHAT: instantiate the conversation session, route history, tool registry,
    chat fallback, and turn logger.
    WHY: every entry point (CLI/web) must share identical wiring so behavior
    stays reproducible across environments.
    HOW: pull runtime configuration from ``app.config`` helpers and hand the
    resulting instances to ``core.dispatcher.CommandDispatcher``.
    """
    session = ConversationSession(greeting=GREETING)
    history = RouteHistoryStore(get_history_path(), limit=get_history_limit())
    pipeline = GeoRoutingPipeline(
        get_geocoder_url(),
        get_router_url(),
        profile=get_route_profile(),
        timeout=get_http_timeout(),
        session=http.build_session(),
    )
    chat = ChatClient(
        model=get_chat_model(),
        api_key=get_llm_api_key(),
        max_turns=get_chat_history_turns(),
    )

    registry = ToolRegistry()
    load_all_core_tools(
        registry,
        session=session,
        history=history,
        pipeline=pipeline,
        chat_backend=chat,
        schedulers=[JsonAlarmScheduler(get_alarm_store_path())],
        pm_markers=get_pm_markers(),
        default_route=get_default_route(),
    )

    turn_logger = TurnLogger(
        turn_log_path=get_turn_log_path(),
        enabled=is_logging_enabled(),
        max_bytes=get_log_max_bytes(),
        backup_count=get_log_backup_count(),
    )
    return CommandDispatcher(registry, session, history=history, turn_logger=turn_logger)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# -- Interactive CLI loop ------------------------------------------------------
def main() -> None:
    """Minimal CLI driver that proxies stdin to the dispatcher.

    WHAT: read typed commands, forward them to ``dispatch``, and echo the reply.
    WHY: offers a local debugging surface identical to what the voice shell
    sends, without a microphone or UI.
    HOW: reuse ``build_dispatcher`` (same stack the API uses) and exit on
    EOF/KeyboardInterrupt or "quit" commands.
    """
    configure_logging()
    dispatcher = build_dispatcher()
    print(f"{GREETING} (gõ 'quit' hoặc 'exit' để thoát)")

    while True:
        try:
            message = input("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if message.strip().lower() in {"quit", "exit"}:
            print("Goodbye!")
            break
        if not message.strip():
            continue

        result = dispatcher.dispatch(message)
        print()
        print(f"Assistant: {result.text}")
        print()


if __name__ == "__main__":
    main()
