"""FastAPI application exposing the dispatcher to a voice or web shell."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.main import build_dispatcher
from core.dispatcher import CommandDispatcher, DispatchResult
from core.route_history import RouteHistoryStore

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str
    request_id: Optional[str] = Field(default=None, max_length=64)


def _format_response(result: DispatchResult) -> Dict[str, Any]:
    """WHAT: reshape ``DispatchResult`` into the UI schema.

    WHY: the shell renders the reply, speaks ``speech``, and uses
    ``request_id`` to poll the map overlay a directions request produced.
    HOW: flatten the intent and keep the tool summary as a nested dict.
    """
    return {
        "reply": result.text,
        "speech": result.speech,
        "request_id": result.request_id,
        "message_id": result.message_id,
        "status": result.status,
        "intent": result.intent.kind,
        "payload": dict(result.intent.payload),
        "summary": result.summary,
        "error": result.error,
        "latency_ms": result.latency_ms,
    }


def create_app(dispatcher: Optional[CommandDispatcher] = None) -> FastAPI:
    """WHAT: instantiate FastAPI around one shared dispatcher.

    WHY: the web shell and the CLI must run the same matcher and tool stack.
    HOW: accept a dispatcher override (tests), keep it on ``app.state``, and
    register the chat, conversation, overlay, and history routes.
    """
    disp = dispatcher or build_dispatcher()

    app = FastAPI(title="Voice Command Router", version="0.1.0")
    app.state.dispatcher = disp

    def _history() -> RouteHistoryStore:
        store = app.state.dispatcher.history
        if store is None:
            raise HTTPException(status_code=404, detail="Route history is not configured.")
        return store

    @app.get("/api/health")
    def health_check() -> Dict[str, Any]:
        return {
            "status": "ok",
            "dispatcher": app.state.dispatcher.status,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.post("/api/chat")
    def chat(payload: ChatRequest) -> Dict[str, Any]:
        message = payload.message.strip()
        if not message:
            raise HTTPException(status_code=400, detail="Message is required.")
        try:
            result = app.state.dispatcher.dispatch(message, request_id=payload.request_id)
        except ValueError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _format_response(result)

    @app.get("/api/messages")
    def messages() -> Dict[str, Any]:
        session = app.state.dispatcher.session
        return {
            "messages": session.messages(),
            "active_overlay_id": session.state.active_overlay_id,
            "in_flight": app.state.dispatcher.in_flight(),
        }

    @app.get("/api/overlays/{request_id}")
    def overlay(request_id: str) -> Dict[str, Any]:
        found = app.state.dispatcher.session.overlay(request_id)
        if found is None:
            raise HTTPException(status_code=404, detail="Overlay not found.")
        return found.to_dict()

    @app.get("/api/history")
    def list_history() -> Dict[str, Any]:
        records = _history().load()
        return {"records": [record.to_dict() for record in records], "count": len(records)}

    @app.delete("/api/history")
    def clear_history() -> Dict[str, Any]:
        _history().clear()
        logger.info("Route history cleared through the web API")
        return {"status": "cleared"}

    @app.post("/api/history/{record_id}/replay")
    def replay_history(record_id: str) -> Dict[str, Any]:
        result = app.state.dispatcher.replay_history(record_id)
        if result is None:
            raise HTTPException(status_code=404, detail="History record not found.")
        return _format_response(result)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from app.config import get_web_ui_host, get_web_ui_port

    uvicorn.run(
        "app.web_api:app",
        host=get_web_ui_host(),
        port=get_web_ui_port(),
        reload=False,
    )
