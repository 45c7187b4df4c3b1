"""Shared test fixtures for potaplan tests.

Each test gets a fresh SQLite database file under tmp_path, migrated to
head through the real Alembic revisions, plus a controllable clock so
TTL and staleness checks can be driven without sleeping.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.database import Store  # noqa: E402
from potaplan.repositories import (  # noqa: E402
    ParkRepository, PlanRepository, WeatherCacheRepository,
)
from potaplan.schemas import ParkUpsert  # noqa: E402


class FakeClock:
    """Callable clock returning a fixed UTC instant until advanced."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture()
def clock():
    return FakeClock(datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def store(tmp_path, clock):
    opened = Store.open(f"sqlite:///{tmp_path / 'pota.db'}", clock=clock)
    assert opened.success, opened.error
    yield opened.data
    opened.data.close()


@pytest.fixture()
def park_repo(store):
    return ParkRepository(store)


@pytest.fixture()
def plan_repo(store):
    return PlanRepository(store)


@pytest.fixture()
def cache_repo(store):
    return WeatherCacheRepository(store)


# ── Sample data fixtures ──

@pytest.fixture()
def sample_parks():
    return [
        ParkUpsert(
            reference="K-0039", name="Yellowstone National Park",
            latitude=44.4280, longitude=-110.5885, grid_square="DN44xk",
            state="WY", country="United States Of America", region="Wyoming",
            park_type="National Park",
        ),
        ParkUpsert(
            reference="K-0001", name="Acadia National Park",
            latitude=44.31, longitude=-68.2034, grid_square="FN54vh",
            state="ME", country="United States Of America", region="Maine",
            park_type="National Park",
        ),
        ParkUpsert(
            reference="VE-0001", name="Banff National Park",
            latitude=51.4968, longitude=-115.9281,
            state=None, country="Canada", region="Alberta",
            park_type="National Park", is_active=False,
        ),
    ]


@pytest.fixture()
def api_parks():
    """Raw records in the shape the POTA API returns them."""
    return [
        {
            "reference": "K-0039", "name": "Yellowstone National Park",
            "latitude": 44.428, "longitude": -110.5885, "grid": "DN44xk",
            "state": "WY", "stateName": "Wyoming", "entityId": 291,
            "entityName": "United States Of America", "locationDesc": "US-WY,US-MT,US-ID",
            "type": "National Park", "isActive": True,
        },
        {
            "reference": "VE-0001", "name": "Banff National Park",
            "latitude": 51.4968, "longitude": -115.9281, "grid": "",
            "state": "", "stateName": "Alberta", "entityId": 1,
            "entityName": "Canada", "locationDesc": "CA-AB",
            "type": "National Park", "isActive": True,
        },
        {
            "reference": "VE-0002", "name": "Jasper National Park",
            "latitude": 52.8734, "longitude": -117.9543, "grid": None,
            "state": None, "stateName": "Alberta", "entityId": 1,
            "entityName": "Canada", "locationDesc": "CA-AB",
            "type": "National Park", "isActive": True,
        },
        {
            "reference": "G-0001", "name": "Dartmoor National Park",
            "latitude": 50.5719, "longitude": -3.9207, "grid": "IO80an",
            "state": None, "stateName": "Devon", "entityId": 223,
            "entityName": "England", "locationDesc": "GB-ENG",
            "type": "National Park", "isActive": True,
        },
    ]


@pytest.fixture()
def open_meteo_response():
    return {
        "latitude": 44.43,
        "longitude": -110.59,
        "daily": {
            "time": ["2026-06-01", "2026-06-02", "2026-06-03"],
            "temperature_2m_max": [68.2, 71.0, 59.4],
            "temperature_2m_min": [38.1, 40.5, 35.0],
            "precipitation_probability_max": [10, 45, 80],
            "windspeed_10m_max": [8.5, 12.1, 20.3],
            "winddirection_10m_dominant": [270, 180, 45],
            "weathercode": [0, 3, 63],
            "sunrise": ["2026-06-01T05:32", "2026-06-02T05:31", "2026-06-03T05:31"],
            "sunset": ["2026-06-01T21:05", "2026-06-02T21:06", "2026-06-03T21:06"],
        },
    }
