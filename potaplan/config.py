"""Application configuration via environment variables or a YAML file."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

VALID_UNITS = ("imperial", "metric")


def _default_data_dir() -> Path:
    return Path(os.path.expanduser("~")) / ".pota"


@dataclass
class Settings:
    """Engine settings. Durations are stored in the units their names state."""
    data_dir: Path = field(default_factory=_default_data_dir)
    database_url: Optional[str] = None  # defaults to sqlite in data_dir
    pota_api_base_url: str = "https://api.pota.app"
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    request_timeout_sec: float = 30.0
    health_timeout_sec: float = 5.0
    weather_cache_ttl_hours: float = 1.0
    park_stale_days: int = 30
    resync_cooldown_hours: float = 1.0
    import_batch_size: int = 1000
    units: str = "imperial"
    default_region: Optional[str] = None  # None syncs every region
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        if not self.database_url:
            self.database_url = f"sqlite:///{self.data_dir / 'pota.db'}"
        # Coerce numerics so env strings and YAML values land on the same types
        self.request_timeout_sec = float(self.request_timeout_sec)
        self.health_timeout_sec = float(self.health_timeout_sec)
        self.weather_cache_ttl_hours = float(self.weather_cache_ttl_hours)
        self.resync_cooldown_hours = float(self.resync_cooldown_hours)
        self.park_stale_days = int(self.park_stale_days)
        self.import_batch_size = int(self.import_batch_size)
        self.units = str(self.units).lower()
        self.log_level = str(self.log_level).upper()

        if self.units not in VALID_UNITS:
            raise ValueError(
                f"Invalid units '{self.units}'. Expected one of {VALID_UNITS}"
            )
        if self.import_batch_size < 1:
            raise ValueError("import_batch_size must be at least 1")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from POTA_* environment variables."""
        kwargs = {}
        for f in fields(cls):
            value = os.environ.get(f"POTA_{f.name.upper()}")
            if value is not None and value != "":
                kwargs[f.name] = value
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "Settings":
        """Load settings from a YAML file. Unknown keys are ignored."""
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


settings = Settings.from_env()
