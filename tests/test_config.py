"""Tests for Settings loading from environment variables and YAML."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from potaplan.config import Settings
from potaplan.result import AppError, ErrorKind, validation_error


class TestDefaults:
    def test_database_under_data_dir(self, tmp_path):
        s = Settings(data_dir=tmp_path)
        assert s.database_url == f"sqlite:///{tmp_path / 'pota.db'}"

    def test_documented_defaults(self, tmp_path):
        s = Settings(data_dir=tmp_path)
        assert s.request_timeout_sec == 30
        assert s.weather_cache_ttl_hours == 1
        assert s.park_stale_days == 30
        assert s.import_batch_size == 1000
        assert s.units == "imperial"
        assert s.default_region is None

    def test_invalid_units(self, tmp_path):
        with pytest.raises(ValueError, match="units"):
            Settings(data_dir=tmp_path, units="furlongs")

    def test_invalid_batch_size(self, tmp_path):
        with pytest.raises(ValueError):
            Settings(data_dir=tmp_path, import_batch_size=0)


class TestFromEnv:
    def test_reads_prefixed_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("POTA_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("POTA_IMPORT_BATCH_SIZE", "250")
        monkeypatch.setenv("POTA_UNITS", "METRIC")
        monkeypatch.setenv("POTA_DEFAULT_REGION", "Canada")
        s = Settings.from_env()
        assert s.data_dir == tmp_path
        assert s.import_batch_size == 250
        assert s.units == "metric"
        assert s.default_region == "Canada"

    def test_empty_variable_ignored(self, monkeypatch, tmp_path):
        monkeypatch.setenv("POTA_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("POTA_LOG_LEVEL", "")
        assert Settings.from_env().log_level == "INFO"


class TestFromYaml:
    def test_loads_known_keys(self, tmp_path):
        path = tmp_path / "pota.yaml"
        path.write_text(
            f"data_dir: {tmp_path}\n"
            "weather_cache_ttl_hours: 2\n"
            "resync_cooldown_hours: 0.5\n"
            "unrelated_key: ignored\n"
        )
        s = Settings.from_yaml(path)
        assert s.weather_cache_ttl_hours == 2.0
        assert s.resync_cooldown_hours == 0.5

    def test_empty_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Settings.from_yaml(path).units == "imperial"


class TestResultEnvelope:
    def test_error_str(self):
        err = AppError("bad row", "CSV_IMPORT_STRICT_ERROR", ErrorKind.VALIDATION)
        assert str(err) == "[CSV_IMPORT_STRICT_ERROR] bad row"

    def test_factory_sets_kind(self):
        result = validation_error("nope", "INVALID_DATE_FORMAT")
        assert not result.success
        assert result.data is None
        assert result.error.kind == ErrorKind.VALIDATION
        assert result.error.suggestions == []
