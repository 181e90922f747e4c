"""Shared HTTP session for the geocoding and routing services."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = "vi-voice-router/0.1"
DEFAULT_TIMEOUT = 8.0


def build_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "User-Agent": user_agent or DEFAULT_USER_AGENT,
        "Accept": "application/json",
        "Accept-Language": "vi,en;q=0.8",
    })
    retry = Retry(total=3, backoff_factor=0.2, status_forcelist=[429, 500, 502, 503, 504])
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    return session


_session = build_session()


def get(url: str, *, session: requests.Session | None = None, **kwargs) -> requests.Response:
    # Wrapper around session.get with sane defaults
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    return (session or _session).get(url, **kwargs)


__all__ = ["build_session", "get", "DEFAULT_TIMEOUT", "DEFAULT_USER_AGENT"]
