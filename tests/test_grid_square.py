"""Tests for potaplan.core.grid_square (pure functions)."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.core.grid_square import (
    calculate_distance, calculate_grid_square, grid_to_coordinates,
)


class TestCalculateGridSquare:
    def test_yellowstone(self):
        assert calculate_grid_square(44.4286, -110.5885) == "DN44qk"

    def test_southern_hemisphere(self):
        # Sydney
        assert calculate_grid_square(-33.8688, 151.2093)[:4] == "QF56"

    def test_origin(self):
        assert calculate_grid_square(0, 0) == "JJ00aa"

    def test_six_characters(self):
        assert len(calculate_grid_square(51.4968, -115.9281)) == 6


class TestGridToCoordinates:
    def test_four_char_center(self):
        lat, lon = grid_to_coordinates("FN31")
        assert lat == pytest.approx(41.5)
        assert lon == pytest.approx(-73.0)

    def test_six_char_round_trip_is_close(self):
        lat, lon = grid_to_coordinates(calculate_grid_square(44.4286, -110.5885))
        assert lat == pytest.approx(44.4286, abs=0.05)
        assert lon == pytest.approx(-110.5885, abs=0.1)

    def test_lowercase_accepted(self):
        assert grid_to_coordinates("dn44qk") == grid_to_coordinates("DN44QK")

    def test_too_short(self):
        assert grid_to_coordinates("DN") is None


class TestCalculateDistance:
    def test_same_point(self):
        assert calculate_distance(44.0, -110.0, 44.0, -110.0) == pytest.approx(0.0)

    def test_one_degree_longitude_at_equator(self):
        assert calculate_distance(0, 0, 0, 1) == pytest.approx(69.09, abs=0.01)

    def test_symmetric(self):
        d1 = calculate_distance(44.4286, -110.5885, 44.31, -68.2034)
        d2 = calculate_distance(44.31, -68.2034, 44.4286, -110.5885)
        assert d1 == pytest.approx(d2)
        assert 2000 < d1 < 2200
