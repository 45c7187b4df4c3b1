"""Tests for WeatherCacheRepository: quantized keys, TTL and sweeps."""

import json
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.repositories.weather_cache_repository import quantize_coordinate
from potaplan.result import ErrorKind


class TestQuantize:
    def test_rounds_to_four_places(self):
        assert quantize_coordinate(44.4285678) == pytest.approx(44.4286)
        assert quantize_coordinate(-110.5885123) == pytest.approx(-110.5885)

    def test_already_quantized_unchanged(self):
        assert quantize_coordinate(44.4286) == 44.4286


class TestGetSet:
    def test_precise_write_coarse_read(self, cache_repo):
        cache_repo.set(44.4285678, -110.5885123, "2026-06-01", {"high": 70})
        hit = cache_repo.get(44.4286, -110.5885, "2026-06-01").data
        assert hit is not None
        assert json.loads(hit.data) == {"high": 70}

    def test_coarse_write_precise_read(self, cache_repo):
        cache_repo.set(44.4286, -110.5885, date(2026, 6, 1), {"high": 70})
        hit = cache_repo.get(44.4285678, -110.5885123, date(2026, 6, 1)).data
        assert hit is not None
        assert hit.latitude == pytest.approx(44.4286)

    def test_set_overwrites_same_key(self, cache_repo):
        cache_repo.set(44.4286, -110.5885, "2026-06-01", {"v": 1})
        cache_repo.set(44.4286, -110.5885, "2026-06-01", {"v": 2})
        assert cache_repo.count().data == 1
        assert json.loads(cache_repo.get(44.4286, -110.5885, "2026-06-01").data.data) == {"v": 2}

    def test_miss_returns_none(self, cache_repo):
        assert cache_repo.get(10, 10, "2026-06-01").data is None

    def test_expires_at_is_fetched_plus_ttl(self, cache_repo, clock):
        entry = cache_repo.set(1, 1, "2026-06-01", "{}", ttl=timedelta(hours=3)).data
        assert entry.fetched_at == clock()
        assert entry.expires_at - entry.fetched_at == timedelta(hours=3)

    def test_bad_date_is_validation_error(self, cache_repo):
        result = cache_repo.get(1, 1, "2026-13-45")
        assert not result.success
        assert result.error.kind == ErrorKind.VALIDATION


class TestExpiry:
    def test_fresh_before_ttl_expired_after(self, cache_repo, clock):
        cache_repo.set(44.4286, -110.5885, "2026-06-01", "{}", ttl=timedelta(hours=1))

        clock.advance(minutes=59)
        assert cache_repo.is_expired(44.4286, -110.5885, "2026-06-01").data is False

        clock.advance(minutes=2)
        assert cache_repo.is_expired(44.4286, -110.5885, "2026-06-01").data is True

    def test_missing_key_counts_as_expired(self, cache_repo):
        assert cache_repo.is_expired(0, 0, "2026-06-01").data is True


class TestRangeAndSweep:
    def test_set_many_and_get_range(self, cache_repo):
        written = cache_repo.set_many(44.4286, -110.5885, [
            ("2026-06-03", {"d": 3}),
            ("2026-06-01", {"d": 1}),
            ("2026-06-02", {"d": 2}),
            ("2026-06-20", {"d": 20}),
        ])
        assert written.data == 4

        entries = cache_repo.get_range(44.4286, -110.5885, "2026-06-01", "2026-06-08").data
        assert [e.forecast_date for e in entries] == [
            date(2026, 6, 1), date(2026, 6, 2), date(2026, 6, 3),
        ]

    def test_delete_expired(self, cache_repo, clock):
        cache_repo.set(1, 1, "2026-06-01", "{}", ttl=timedelta(hours=1))
        cache_repo.set(2, 2, "2026-06-01", "{}", ttl=timedelta(hours=6))

        clock.advance(hours=2)
        assert cache_repo.delete_expired().data == 1
        assert cache_repo.count().data == 1
        assert cache_repo.get(2, 2, "2026-06-01").data is not None

    def test_delete_expired_on_empty_cache(self, cache_repo):
        assert cache_repo.delete_expired().data == 0

    def test_last_write_time(self, cache_repo, clock):
        assert cache_repo.last_write_time().data is None
        cache_repo.set(1, 1, "2026-06-01", "{}")
        clock.advance(minutes=10)
        cache_repo.set(2, 2, "2026-06-01", "{}")
        assert cache_repo.last_write_time().data == clock()
