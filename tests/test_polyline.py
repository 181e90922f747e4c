import pytest

from core.geo import Coordinate
from core.polyline import decode_polyline


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def _encode(points):
    encoded = []
    prev_lat = prev_lng = 0
    for lat, lng in points:
        lat_e5 = round(lat * 1e5)
        lng_e5 = round(lng * 1e5)
        encoded.append(_encode_value(lat_e5 - prev_lat))
        encoded.append(_encode_value(lng_e5 - prev_lng))
        prev_lat, prev_lng = lat_e5, lng_e5
    return "".join(encoded)


def test_decodes_reference_polyline():
    path = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    expected = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
    assert len(path) == 3
    for point, (lat, lng) in zip(path, expected):
        assert point.latitude == pytest.approx(lat, abs=1e-9)
        assert point.longitude == pytest.approx(lng, abs=1e-9)


def test_decode_reverses_encoding_of_hanoi_route():
    points = [
        (21.02880, 105.85210),
        (21.02733, 105.84912),
        (21.01801, 105.83020),
        (21.00379, 105.81999),
        (-33.86785, 151.20732),
    ]
    path = decode_polyline(_encode(points))
    assert len(path) == len(points)
    for point, (lat, lng) in zip(path, points):
        assert abs(point.latitude - lat) <= 1e-5
        assert abs(point.longitude - lng) <= 1e-5


def test_empty_string_is_empty_path():
    assert decode_polyline("") == ()


def test_result_is_an_immutable_tuple_of_coordinates():
    path = decode_polyline("_p~iF~ps|U")
    assert isinstance(path, tuple)
    assert path == (Coordinate(38.5, -120.2),)


def test_truncated_input_raises_value_error():
    # Drop the final chunk of the longitude value.
    with pytest.raises(ValueError):
        decode_polyline("_p~iF~ps|")


def test_characters_below_offset_are_rejected():
    with pytest.raises(ValueError):
        decode_polyline("_p~iF ")
