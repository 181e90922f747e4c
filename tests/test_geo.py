import math

import pytest

from core.geo import EARTH_RADIUS_KM, Coordinate, haversine_km, total_distance_km

HO_GUOM = Coordinate(21.0287, 105.8524)
NGA_TU_SO = Coordinate(21.0030, 105.8196)


def test_haversine_of_identical_points_is_zero():
    assert haversine_km(HO_GUOM, HO_GUOM) == 0.0


def test_haversine_quarter_meridian():
    north_pole = Coordinate(90.0, 0.0)
    equator = Coordinate(0.0, 0.0)
    assert haversine_km(equator, north_pole) == pytest.approx(math.pi * EARTH_RADIUS_KM / 2)


def test_haversine_is_symmetric():
    assert haversine_km(HO_GUOM, NGA_TU_SO) == pytest.approx(haversine_km(NGA_TU_SO, HO_GUOM))


def test_two_point_total_matches_haversine():
    expected = round(haversine_km(HO_GUOM, NGA_TU_SO), 1)
    assert total_distance_km([HO_GUOM, NGA_TU_SO]) == pytest.approx(expected)
    assert 4.0 < expected < 4.5


def test_total_sums_every_segment():
    midpoint = Coordinate(21.0200, 105.8400)
    path = (HO_GUOM, midpoint, NGA_TU_SO)
    expected = round(haversine_km(HO_GUOM, midpoint) + haversine_km(midpoint, NGA_TU_SO), 1)
    assert total_distance_km(path) == pytest.approx(expected)


@pytest.mark.parametrize("path", [(), (HO_GUOM,)])
def test_short_paths_have_zero_length(path):
    assert total_distance_km(path) == 0


def test_total_is_rounded_to_one_decimal():
    value = total_distance_km([Coordinate(0.0, 0.0), Coordinate(0.0, 0.123)])
    assert value == round(value, 1)
