"""
Weather forecast retrieval with a TTL cache in front of Open-Meteo.

Per (coordinates, date):
    1. Fresh cache row           -> returned as-is, no request
    2. Miss or expired           -> fetch, normalize, cache the day, return it
    3. Fetch fails, row exists   -> cached day returned with a stale warning
    4. Fetch fails, no row       -> the fetch error is returned

Malformed cached JSON counts as a miss. Cache write failures after a
successful fetch are returned as infrastructure errors rather than hidden.
"""

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd
from pydantic import ValidationError

from ..adapters.weather_client import OpenMeteoClient
from ..repositories.weather_cache_repository import WeatherCacheRepository
from ..result import AppError, ErrorKind, Result, validation_error
from ..schemas import DailyForecast, Location, WeatherCacheEntryRead, WeatherForecast

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=1)
MULTI_DAY_FALLBACK_DAYS = 7

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# WMO Code Table 4677 (simplified)
WMO_CODE_DESCRIPTIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Freezing drizzle",
    57: "Freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Freezing rain",
    67: "Freezing rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with heavy hail",
}

CARDINAL_DIRECTIONS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

DAILY_COLUMNS = {
    "temperature_2m_max": "high_temp",
    "temperature_2m_min": "low_temp",
    "precipitation_probability_max": "precipitation_chance",
    "windspeed_10m_max": "wind_speed",
    "winddirection_10m_dominant": "wind_degrees",
    "weathercode": "weathercode",
    "sunrise": "sunrise",
    "sunset": "sunset",
}


def get_weather_code_description(code: int) -> str:
    return WMO_CODE_DESCRIPTIONS.get(code, f"Unknown weather code: {code}")


def degrees_to_cardinal(degrees: Optional[float]) -> str:
    """16-point compass direction; ``N/A`` when no direction is reported."""
    if degrees is None or degrees != degrees:
        return "N/A"
    return CARDINAL_DIRECTIONS[math.floor(degrees % 360 / 22.5 + 0.5) % 16]


def normalize_weather_data(raw: dict, fetched_at: datetime) -> WeatherForecast:
    """Turn an Open-Meteo daily response into a WeatherForecast."""
    daily = raw.get("daily") or {}
    times = list(daily.get("time") or [])

    df = pd.DataFrame({"date": pd.Series(times, dtype="object")})
    for src, dst in DAILY_COLUMNS.items():
        values = list(daily.get(src) or [])
        df[dst] = pd.Series(values[:len(times)], dtype="object").reindex(df.index)

    numeric = ["high_temp", "low_temp", "precipitation_chance", "wind_speed", "weathercode"]
    df[numeric] = df[numeric].apply(pd.to_numeric, errors="coerce").fillna(0)
    df["wind_degrees"] = pd.to_numeric(df["wind_degrees"], errors="coerce")

    forecasts = []
    for row in df.to_dict("records"):
        forecasts.append(DailyForecast(
            date=str(row["date"]),
            high_temp=float(row["high_temp"]),
            low_temp=float(row["low_temp"]),
            precipitation_chance=float(row["precipitation_chance"]),
            wind_speed=float(row["wind_speed"]),
            wind_direction=degrees_to_cardinal(row["wind_degrees"]),
            conditions=get_weather_code_description(int(row["weathercode"])),
            sunrise=_optional_str(row["sunrise"]),
            sunset=_optional_str(row["sunset"]),
        ))

    return WeatherForecast(
        location=Location(lat=raw.get("latitude", 0.0), lon=raw.get("longitude", 0.0)),
        fetched_at=fetched_at,
        forecasts=forecasts,
    )


def _optional_str(val) -> Optional[str]:
    if val is None or (isinstance(val, float) and val != val):
        return None
    return str(val)


def _parse_cached(entry: WeatherCacheEntryRead) -> Optional[DailyForecast]:
    try:
        return DailyForecast.model_validate_json(entry.data)
    except ValidationError:
        logger.debug(
            f"Ignoring malformed cache entry for ({entry.latitude}, {entry.longitude}) "
            f"on {entry.forecast_date}"
        )
        return None


class WeatherService:
    def __init__(
        self,
        cache: WeatherCacheRepository,
        client: OpenMeteoClient,
        ttl: timedelta = CACHE_TTL,
    ):
        self.cache = cache
        self.client = client
        self.ttl = ttl

    @property
    def store(self):
        return self.cache.store

    def get_forecast(self, lat: float, lon: float, date_str: str) -> Result[WeatherForecast]:
        """Forecast for one date, served from cache while fresh."""
        if not DATE_PATTERN.match(date_str or ""):
            return validation_error(
                f"Invalid date format: {date_str}. Expected YYYY-MM-DD.",
                "INVALID_DATE_FORMAT",
                ["Use the format YYYY-MM-DD for the date parameter"],
            )

        cached_result = self.cache.get(lat, lon, date_str)
        if not cached_result.success:
            return cached_result
        cached = cached_result.data

        if cached is not None and cached.expires_at > self.store.now():
            day = _parse_cached(cached)
            if day is not None:
                logger.debug(f"Weather cache hit for ({lat}, {lon}) on {date_str}")
                return Result.ok(WeatherForecast(
                    location=Location(lat=cached.latitude, lon=cached.longitude),
                    fetched_at=cached.fetched_at,
                    forecasts=[day],
                ))

        logger.debug(f"Weather cache miss for ({lat}, {lon}) on {date_str}")
        fetched = self.client.fetch_forecast(lat, lon)

        if fetched.success:
            forecast = normalize_weather_data(fetched.data, self.store.now())
            day = next((f for f in forecast.forecasts if f.date == date_str), None)
            if day is None:
                forecast.stale_warning = (
                    f"Requested date {date_str} not available in forecast. "
                    "Showing available dates."
                )
                return Result.ok(forecast)

            stored = self.cache.set(lat, lon, date_str, day, ttl=self.ttl)
            if not stored.success:
                return stored
            return Result.ok(WeatherForecast(
                location=forecast.location,
                fetched_at=forecast.fetched_at,
                forecasts=[day],
            ))

        err = fetched.error
        if cached is not None and err.kind != ErrorKind.VALIDATION:
            day = _parse_cached(cached)
            if day is not None:
                logger.warning(
                    f"Serving stale forecast for ({lat}, {lon}) on {date_str}: {err.message}"
                )
                return Result.ok(WeatherForecast(
                    location=Location(lat=cached.latitude, lon=cached.longitude),
                    fetched_at=cached.fetched_at,
                    forecasts=[day],
                    stale_warning=(
                        f"Using cached data from {cached.fetched_at:%Y-%m-%d %H:%M} UTC. "
                        f"API unavailable: {err.message}"
                    ),
                ))

        return self._fetch_failure(err)

    def get_multi_day_forecast(self, lat: float, lon: float) -> Result[WeatherForecast]:
        """All forecast days in one request, cached in one transaction.

        On fetch failure falls back to cached days from today through
        today + 7.
        """
        fetched = self.client.fetch_forecast(lat, lon)

        if fetched.success:
            forecast = normalize_weather_data(fetched.data, self.store.now())
            stored = self.cache.set_many(
                lat, lon, [(f.date, f) for f in forecast.forecasts], ttl=self.ttl,
            )
            if not stored.success:
                return stored
            return Result.ok(forecast)

        err = fetched.error
        today = self.store.now().date()
        cached = self.cache.get_range(
            lat, lon, today, today + timedelta(days=MULTI_DAY_FALLBACK_DAYS),
        )
        if cached.success and cached.data:
            days = []
            oldest = None
            for entry in cached.data:
                day = _parse_cached(entry)
                if day is None:
                    continue
                days.append(day)
                if oldest is None or entry.fetched_at < oldest:
                    oldest = entry.fetched_at

            if days:
                logger.warning(f"Serving {len(days)} stale forecast days for ({lat}, {lon})")
                first = cached.data[0]
                return Result.ok(WeatherForecast(
                    location=Location(lat=first.latitude, lon=first.longitude),
                    fetched_at=oldest,
                    forecasts=sorted(days, key=lambda d: d.date),
                    stale_warning=f"Using cached data. API unavailable: {err.message}",
                ))

        return self._fetch_failure(err)

    def cleanup_cache(self) -> Result[int]:
        """Delete expired cache rows. Returns the number removed."""
        removed = self.cache.delete_expired()
        if removed.success:
            logger.info(f"Removed {removed.data} expired weather cache entries")
        return removed

    @staticmethod
    def _fetch_failure(err: AppError) -> Result:
        return Result.fail(AppError(
            f"Failed to get weather forecast: {err.message}",
            err.code,
            err.kind,
            err.suggestions,
            err.status_code,
        ))
