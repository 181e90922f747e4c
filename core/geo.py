"""Coordinate types and great-circle distance helpers."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Tuple

EARTH_RADIUS_KM = 6371.0


class Coordinate(NamedTuple):
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


RoutePath = Tuple[Coordinate, ...]


def haversine_km(start: Coordinate, end: Coordinate) -> float:
    """Great-circle distance between two points, in kilometres."""
    d_lat = math.radians(end.latitude - start.latitude)
    d_lon = math.radians(end.longitude - start.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(start.latitude)) * math.cos(math.radians(end.latitude)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def total_distance_km(path: Sequence[Coordinate]) -> float:
    """Sum consecutive segments and round to one decimal for display."""
    if not path or len(path) < 2:
        return 0.0
    distance = sum(haversine_km(path[i], path[i + 1]) for i in range(len(path) - 1))
    return round(distance, 1)


__all__ = ["Coordinate", "EARTH_RADIUS_KM", "RoutePath", "haversine_km", "total_distance_km"]
