"""
Unit tests for the distance calculator and geometry helpers.

Run with: python -m pytest tests/test_geo_utils.py -v
"""

import math

import pytest

from utils.geo_utils import (
    EARTH_RADIUS_MILES,
    boundary_contains,
    calculate_distance,
    get_boundary_bounds,
    is_valid_coordinate,
    is_within_radius,
    parse_coordinate,
)

SQUARE = {
    'type': 'Polygon',
    'coordinates': [[(-76.0, 39.0), (-74.0, 39.0), (-74.0, 41.0), (-76.0, 41.0), (-76.0, 39.0)]],
}


class TestCalculateDistance:
    """Haversine distance in miles."""

    def test_identity_is_zero(self):
        assert calculate_distance(40.0, -75.0, 40.0, -75.0) == pytest.approx(0.0, abs=1e-9)

    def test_symmetry(self):
        a = calculate_distance(39.9526, -75.1652, 40.7128, -74.0060)
        b = calculate_distance(40.7128, -74.0060, 39.9526, -75.1652)
        assert a == pytest.approx(b, rel=1e-12)

    def test_one_degree_at_equator(self):
        expected = EARTH_RADIUS_MILES * math.pi / 180
        assert calculate_distance(0, 0, 0, 1) == pytest.approx(expected, rel=1e-9)
        assert calculate_distance(0, 0, 0, 1) == pytest.approx(69.09, abs=0.01)

    def test_philadelphia_to_new_york(self):
        assert calculate_distance(39.9526, -75.1652, 40.7128, -74.0060) == pytest.approx(80.6, abs=0.5)

    def test_antipodal_points_do_not_produce_nan(self):
        distance = calculate_distance(0, 0, 0, 180)
        assert distance == pytest.approx(math.pi * EARTH_RADIUS_MILES, rel=1e-9)

    @pytest.mark.parametrize("coords", [
        (None, -75.0, 40.0, -75.0),
        (40.0, None, 40.0, -75.0),
        (40.0, -75.0, "", -75.0),
        (40.0, -75.0, 40.0, "abc"),
        (float('nan'), -75.0, 40.0, -75.0),
        (40.0, float('inf'), 40.0, -75.0),
    ])
    def test_invalid_coordinates_return_none(self, coords):
        assert calculate_distance(*coords) is None

    def test_numeric_strings_are_accepted(self):
        assert calculate_distance("40.0", "-75.0", 40.0, -75.0) == pytest.approx(0.0, abs=1e-9)


class TestCoordinateParsing:

    @pytest.mark.parametrize("value, expected", [
        (40.5, 40.5),
        ("40.5", 40.5),
        (" -75 ", -75.0),
        (0, 0.0),
        (None, None),
        ("", None),
        ("n/a", None),
        (float('nan'), None),
        (True, None),
    ])
    def test_parse_coordinate(self, value, expected):
        assert parse_coordinate(value) == expected

    def test_zero_is_a_valid_coordinate(self):
        assert is_valid_coordinate(0, 0)

    def test_missing_latitude_is_invalid(self):
        assert not is_valid_coordinate(None, -75.0)


class TestIsWithinRadius:

    def test_inside_and_on_the_edge(self):
        assert is_within_radius(10.0, 35)
        assert is_within_radius(35.0, 35)
        assert not is_within_radius(35.0001, 35)

    def test_invalid_distance_is_never_within(self):
        assert not is_within_radius(None, 35)
        assert not is_within_radius(float('nan'), 35)

    @pytest.mark.parametrize("radius", [0, -1, float('nan'), None, "abc"])
    def test_non_positive_or_invalid_radius_covers_nothing(self, radius):
        assert not is_within_radius(0.0, radius)


class TestBoundaryHelpers:

    def test_point_inside_boundary(self):
        assert boundary_contains(SQUARE, 40.0, -75.0)

    def test_point_outside_boundary(self):
        assert not boundary_contains(SQUARE, 42.0, -75.0)

    def test_missing_geometry_or_coordinate(self):
        assert not boundary_contains(None, 40.0, -75.0)
        assert not boundary_contains(SQUARE, None, -75.0)

    def test_bounds_are_lat_lon_corners(self):
        assert get_boundary_bounds(SQUARE) == ((39.0, -76.0), (41.0, -74.0))

    def test_bounds_without_geometry(self):
        assert get_boundary_bounds(None) is None
