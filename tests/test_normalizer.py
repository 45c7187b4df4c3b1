"""Tests for the park normalization pipeline (core.normalizer)."""

import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.core.normalizer import (
    _safe_str,
    build_pota_url,
    extract_state_from_location,
    filter_by_region,
    normalize_parks,
)


# ── extract_state_from_location ──

class TestExtractState:
    def test_single_state(self):
        assert extract_state_from_location("US-TX") == "TX"

    def test_multi_state_takes_first(self):
        assert extract_state_from_location("US-CA,US-NV") == "CA"

    def test_non_us(self):
        assert extract_state_from_location("CA-ON") is None

    def test_empty(self):
        assert extract_state_from_location("") is None
        assert extract_state_from_location(None) is None


# ── Region filter ──

class TestFilterByRegion:
    def _df(self, api_parks):
        return pd.DataFrame(api_parks)

    def test_country_substring_case_insensitive(self, api_parks):
        df = filter_by_region(self._df(api_parks), "canada")
        assert sorted(df["reference"]) == ["VE-0001", "VE-0002"]

    def test_subregion_substring(self, api_parks):
        df = filter_by_region(self._df(api_parks), "wyo")
        assert list(df["reference"]) == ["K-0039"]

    def test_state_code_equality(self, api_parks):
        df = filter_by_region(self._df(api_parks), "wy")
        assert list(df["reference"]) == ["K-0039"]

    def test_no_match(self, api_parks):
        assert filter_by_region(self._df(api_parks), "atlantis").empty


# ── Full pipeline ──

class TestNormalizeParks:
    def test_empty_input(self):
        assert normalize_parks([]) == []

    def test_fields_mapped(self, api_parks):
        parks = {p.reference: p for p in normalize_parks(api_parks)}
        ys = parks["K-0039"]
        assert ys.country == "United States Of America"
        assert ys.region == "Wyoming"
        assert ys.park_type == "National Park"
        assert ys.grid_square == "DN44xk"
        assert ys.pota_url == "https://pota.app/#/park/K-0039"
        assert ys.park_metadata["entityId"] == 291
        assert ys.park_metadata["locationDesc"] == "US-WY,US-MT,US-ID"

    def test_grid_derived_when_missing(self, api_parks):
        parks = {p.reference: p for p in normalize_parks(api_parks)}
        assert parks["VE-0001"].grid_square == "DO21al"
        assert len(parks["VE-0002"].grid_square) == 6

    def test_state_falls_back_to_location(self):
        parks = normalize_parks([{
            "reference": "K-1234", "name": "Somewhere",
            "latitude": 36.0, "longitude": -115.0, "locationDesc": "US-NV,US-CA",
        }])
        assert parks[0].state == "NV"

    def test_region_filter_applied(self, api_parks):
        parks = normalize_parks(api_parks, region="CANADA")
        assert sorted(p.reference for p in parks) == ["VE-0001", "VE-0002"]

    def test_rows_without_coordinates_dropped(self, api_parks):
        api_parks.append({"reference": "K-0002", "name": "No coords", "latitude": None})
        parks = normalize_parks(api_parks)
        assert "K-0002" not in {p.reference for p in parks}
        assert len(parks) == 4

    def test_reference_uppercased(self):
        parks = normalize_parks([{"reference": "k-0039", "name": "Y", "latitude": 1, "longitude": 2}])
        assert parks[0].reference == "K-0039"
        assert parks[0].is_active is True


class TestHelpers:
    def test_build_pota_url(self):
        assert build_pota_url("k-0001") == "https://pota.app/#/park/K-0001"

    @pytest.mark.parametrize("val", [None, float("nan"), "", "  ", "None", "nan"])
    def test_safe_str_empty_values(self, val):
        assert _safe_str(val) is None

    def test_safe_str_strips(self):
        assert _safe_str("  WY ") == "WY"
