"""Centralize defaults and environment lookups for the dispatcher."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Tuple

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Default configuration values
# ---------------------------------------------------------------------------
_DEFAULT_CHAT_MODEL: str = "gpt-4o-mini"
_DEFAULT_CHAT_HISTORY_TURNS = 10
_DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
_DEFAULT_ROUTER_URL = "http://router.project-osrm.org"
_DEFAULT_ROUTE_PROFILE = "driving"
_DEFAULT_HTTP_TIMEOUT = 8.0
_DEFAULT_HISTORY_PATH = "data/route_history.json"
_DEFAULT_HISTORY_LIMIT = 10
_DEFAULT_ALARM_STORE_PATH = "data/alarms.json"
_DEFAULT_PM_MARKERS = "chiều,tối,pm"
_DEFAULT_ROUTE_START = "Hồ Gươm, Hà Nội"
_DEFAULT_ROUTE_END = "Ngã Tư Sở, Hà Nội"
_DEFAULT_LOGGING_ENABLED: bool = True
_DEFAULT_LOG_DIR = "logs"
_DEFAULT_LOG_LEVEL = "INFO"
_TURN_LOG_FILENAME = "turns.jsonl"
_DEFAULT_LOG_MAX_BYTES = 1_000_000
_DEFAULT_LOG_BACKUP_COUNT = 5
_DEFAULT_WEB_UI_HOST = "127.0.0.1"
_DEFAULT_WEB_UI_PORT = 9000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _source(env: Dict[str, str] | None) -> Mapping[str, str]:
    return env if env is not None else os.environ


def _read_bool(env: Dict[str, str] | None, key: str, default: bool) -> bool:
    raw = _source(env).get(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _FALSE_VALUES:
        return False
    if normalized in _TRUE_VALUES:
        return True
    return default


def _read_int(env: Dict[str, str] | None, key: str, default: int, minimum: int = 0) -> int:
    raw = _source(env).get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(value, minimum)


# ---------------------------------------------------------------------------
# Chat completion
# ---------------------------------------------------------------------------
def get_llm_api_key(env: Dict[str, str] | None = None) -> str | None:
    """Return the API key for the chat completion service.

    Args:
        env: Optional mapping used instead of ``os.environ`` to simplify testing.

    Returns:
        The API key string if present, otherwise ``None``.
    """

    return _source(env).get("OPENAI_API_KEY")


def get_chat_model(env: Dict[str, str] | None = None) -> str:
    """Return the model identifier used for the chat fallback."""

    return _source(env).get("CHAT_MODEL", _DEFAULT_CHAT_MODEL)


def get_chat_history_turns(env: Dict[str, str] | None = None) -> int:
    return _read_int(env, "CHAT_HISTORY_TURNS", _DEFAULT_CHAT_HISTORY_TURNS, minimum=1)


# ---------------------------------------------------------------------------
# Geocoding and routing
# ---------------------------------------------------------------------------
def get_geocoder_url(env: Dict[str, str] | None = None) -> str:
    """Return the Nominatim-compatible search endpoint."""

    return _source(env).get("GEOCODER_URL", _DEFAULT_GEOCODER_URL)


def get_router_url(env: Dict[str, str] | None = None) -> str:
    """Return the base URL of the OSRM-compatible routing service."""

    return _source(env).get("ROUTER_URL", _DEFAULT_ROUTER_URL).rstrip("/")


def get_route_profile(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("ROUTE_PROFILE", _DEFAULT_ROUTE_PROFILE)


def get_http_timeout(env: Dict[str, str] | None = None) -> float:
    raw = _source(env).get("HTTP_TIMEOUT")
    if raw is None:
        return _DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return _DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else _DEFAULT_HTTP_TIMEOUT


def get_default_route(env: Dict[str, str] | None = None) -> Tuple[str, str]:
    """Return the start/end pair used when a directions request names no places."""

    source = _source(env)
    return (
        source.get("DEFAULT_ROUTE_START", _DEFAULT_ROUTE_START),
        source.get("DEFAULT_ROUTE_END", _DEFAULT_ROUTE_END),
    )


# ---------------------------------------------------------------------------
# Stores and parsing
# ---------------------------------------------------------------------------
def get_history_path(env: Dict[str, str] | None = None) -> Path:
    """Return the JSON file that keeps recent route searches."""

    override = _source(env).get("HISTORY_PATH")
    return Path(override) if override else Path(_DEFAULT_HISTORY_PATH)


def get_history_limit(env: Dict[str, str] | None = None) -> int:
    return _read_int(env, "HISTORY_LIMIT", _DEFAULT_HISTORY_LIMIT, minimum=1)


def get_alarm_store_path(env: Dict[str, str] | None = None) -> Path:
    """Return the JSON file that records scheduled alarms."""

    override = _source(env).get("ALARM_STORE_PATH")
    return Path(override) if override else Path(_DEFAULT_ALARM_STORE_PATH)


def get_pm_markers(env: Dict[str, str] | None = None) -> Tuple[str, ...]:
    """Return the afternoon/evening tokens that shift parsed hours past noon."""

    raw = _source(env).get("PM_MARKERS")
    values = raw if raw is not None else _DEFAULT_PM_MARKERS
    markers = tuple(part.strip().lower() for part in values.split(",") if part.strip())
    return markers or tuple(_DEFAULT_PM_MARKERS.split(","))


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def is_logging_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether the JSONL turn log is written."""

    return _read_bool(env, "LOGGING_ENABLED", _DEFAULT_LOGGING_ENABLED)


def get_log_dir(env: Dict[str, str] | None = None) -> Path:
    """Return the base directory for turn-by-turn logs."""

    override = _source(env).get("LOG_DIR")
    return Path(override) if override else Path(_DEFAULT_LOG_DIR)


def get_turn_log_path(env: Dict[str, str] | None = None) -> Path:
    """Return the full path for the turn log JSONL file."""

    return get_log_dir(env) / _TURN_LOG_FILENAME


def get_log_level(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("LOG_LEVEL", _DEFAULT_LOG_LEVEL).strip().upper() or _DEFAULT_LOG_LEVEL


def get_log_max_bytes(env: Dict[str, str] | None = None) -> int:
    """Return the maximum size in bytes before rotating log files."""

    return _read_int(env, "LOG_MAX_BYTES", _DEFAULT_LOG_MAX_BYTES)


def get_log_backup_count(env: Dict[str, str] | None = None) -> int:
    """Return the number of rotated log files to retain."""

    return _read_int(env, "LOG_BACKUP_COUNT", _DEFAULT_LOG_BACKUP_COUNT)


# ---------------------------------------------------------------------------
# Web shell
# ---------------------------------------------------------------------------
def get_web_ui_host(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("WEB_UI_HOST", _DEFAULT_WEB_UI_HOST)


def get_web_ui_port(env: Dict[str, str] | None = None) -> int:
    raw = _source(env).get("WEB_UI_PORT")
    if raw is None:
        return _DEFAULT_WEB_UI_PORT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_WEB_UI_PORT
    return value if 0 < value <= 65535 else _DEFAULT_WEB_UI_PORT
