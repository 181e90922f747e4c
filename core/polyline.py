"""Decoder for the encoded polyline format returned by OSRM-style routers."""

from __future__ import annotations

from typing import List, Tuple

from core.geo import Coordinate, RoutePath

_PRECISION = 1e5
_OFFSET = 63
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20


def _read_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zig-zag encoded delta starting at ``index``; return (delta, next_index)."""
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise ValueError("Truncated polyline: value is missing its final chunk")
        chunk = ord(encoded[index]) - _OFFSET
        index += 1
        if chunk < 0:
            raise ValueError(f"Invalid polyline character at position {index - 1}")
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk < _CONTINUATION:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode_polyline(encoded: str) -> RoutePath:
    """Decode ``encoded`` into an immutable sequence of coordinates.

    Each point is stored as a latitude delta followed by a longitude delta
    against the previous point, in 1e-5 degree units.
    """
    path: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        d_lng, index = _read_value(encoded, index)
        lat += d_lat
        lng += d_lng
        path.append(Coordinate(latitude=lat / _PRECISION, longitude=lng / _PRECISION))
    return tuple(path)


__all__ = ["decode_polyline"]
