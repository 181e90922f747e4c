"""Directions tool: geocode two places, fetch a route, and report its length.

The module separates the low-level helpers that call the geocoding and
routing services from the dispatcher-facing tool that keeps the conversation
and map overlay in sync while the lookups run.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests

from core import http
from core.conversation_state import ConversationSession, MapOverlay
from core.errors import LookupFailure
from core.geo import Coordinate, RoutePath, total_distance_km
from core.parsers.directions import DEFAULT_END, DEFAULT_START
from core.polyline import decode_polyline
from core.route_history import RouteHistoryStore
from core.tool_registry import ToolOutcome

logger = logging.getLogger(__name__)


# --- External API helpers ---------------------------------------------------
class GeoRoutingPipeline:
    """Resolve place names and routes; every failure comes back as ``None``."""

    def __init__(
        self,
        geocoder_url: str,
        router_url: str,
        *,
        profile: str = "driving",
        timeout: float = http.DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._geocoder_url = geocoder_url
        self._router_url = router_url.rstrip("/")
        self._profile = profile
        self._timeout = timeout
        self._session = session

    def resolve_place(self, name: str) -> Optional[Coordinate]:
        if not name or not name.strip():
            return None
        try:
            response = http.get(
                self._geocoder_url,
                session=self._session,
                params={"q": name.strip(), "format": "json", "limit": 1},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, list) or not data:
                logger.info("No geocoding result for %r", name)
                return None
            first = data[0]
            return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            logger.warning("Geocoding %r failed: %s", name, exc)
            return None

    def fetch_route(self, start: Coordinate, end: Coordinate) -> Optional[RoutePath]:
        origin = f"{start.longitude},{start.latitude}"
        destination = f"{end.longitude},{end.latitude}"
        url = f"{self._router_url}/route/v1/{self._profile}/{origin};{destination}"
        try:
            response = http.get(
                url,
                session=self._session,
                params={"overview": "full", "geometries": "polyline"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            geometry = response.json()["routes"][0]["geometry"]
            return decode_polyline(geometry)
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Route lookup %s -> %s failed: %s", origin, destination, exc)
            return None


def build_maps_url(start_name: str, end_name: str, *, mode: str = "walking") -> str:
    """Google Maps directions link for the "open in maps" action."""
    query = urlencode({"api": 1, "origin": start_name, "destination": end_name, "travelmode": mode})
    return f"https://www.google.com/maps/dir/?{query}"


def format_distance(distance_km: float) -> str:
    return str(int(distance_km)) if float(distance_km).is_integer() else str(distance_km)


# --- Dispatcher-facing tool -------------------------------------------------
class DirectionsTool:
    """Runs one directions request and keeps its message/overlay current."""

    def __init__(
        self,
        pipeline: GeoRoutingPipeline,
        session: ConversationSession,
        history: RouteHistoryStore,
        *,
        default_route: Tuple[str, str] = (DEFAULT_START, DEFAULT_END),
    ) -> None:
        self._pipeline = pipeline
        self._session = session
        self._history = history
        self._default_route = default_route

    # WHAT: record the search, then geocode both ends and fetch the route.
    # WHY: the history entry belongs to the request even when resolution later fails.
    # HOW: post a placeholder, write overlay progress under `request_id`, and revise the placeholder with the outcome.
    def __call__(self, payload: Dict[str, Any], *, request_id: str) -> ToolOutcome:
        start, end = self._resolve_names(payload)
        summary: Dict[str, Any] = {"start": start, "end": end}

        try:
            record = self._history.add(start, end)
            summary["history_id"] = record.id
        except OSError as exc:
            logger.warning("Could not persist route history: %s", exc)

        placeholder = self._session.post(
            f"Đang tìm đường đi từ {start} đến {end}...",
            request_id=request_id,
            show_map=True,
        )
        maps_url = build_maps_url(start, end)
        summary["maps_url"] = maps_url
        self._session.put_overlay(
            MapOverlay(request_id=request_id, start_name=start, end_name=end, maps_url=maps_url),
            activate=True,
        )

        start_coords = self._pipeline.resolve_place(start)
        end_coords = self._pipeline.resolve_place(end)
        if not start_coords or not end_coords:
            missing = start if not start_coords else end
            text = f"Không thể tìm thấy địa điểm {missing}"
            self._session.revise(placeholder.id, text=text, show_map=False)
            summary["missing_place"] = missing
            return ToolOutcome(
                text=text,
                summary=summary,
                error=LookupFailure.code,
                message_id=placeholder.id,
                speech=text,
            )

        self._session.update_overlay(request_id, start=start_coords, end=end_coords)
        route = self._pipeline.fetch_route(start_coords, end_coords)
        if route is None:
            text = f"Không thể tìm được đường đi từ {start} đến {end}"
            self._session.revise(placeholder.id, text=text)
            return ToolOutcome(
                text=text,
                summary=summary,
                error=LookupFailure.code,
                message_id=placeholder.id,
                speech=text,
            )

        distance = total_distance_km(route)
        self._session.update_overlay(request_id, route=route, distance_km=distance)
        text = f"Đường đi từ {start} đến {end} (khoảng {format_distance(distance)} km)"
        self._session.revise(placeholder.id, text=text)
        summary.update({"distance_km": distance, "points": len(route)})
        return ToolOutcome(
            text=text,
            summary=summary,
            message_id=placeholder.id,
            speech=f"Đã tìm thấy đường đi từ {start} đến {end}",
        )

    def _resolve_names(self, payload: Dict[str, Any]) -> Tuple[str, str]:
        if payload.get("used_default") or not payload.get("start") or not payload.get("end"):
            return self._default_route
        return str(payload["start"]), str(payload["end"])


__all__ = ["DirectionsTool", "GeoRoutingPipeline", "build_maps_url", "format_distance"]
