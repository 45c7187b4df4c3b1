"""
Forecast cache persistence.

Entries are keyed by (latitude, longitude, forecast_date) with coordinates
rounded to 4 decimal places (~11 m) on every read and write, so nearby
lookups collapse onto one row. A missing row reads the same as an expired
one.
"""

import json
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from ..database import Store
from ..models import WeatherCacheEntry
from ..result import Result, infrastructure_error, validation_error
from ..schemas import WeatherCacheEntryRead

logger = logging.getLogger(__name__)

COORDINATE_PRECISION = 4
DEFAULT_TTL = timedelta(hours=1)

Payload = Union[BaseModel, dict, str]


def quantize_coordinate(value: float) -> float:
    return round(float(value), COORDINATE_PRECISION)


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _serialize(payload: Payload) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json()
    if isinstance(payload, str):
        return payload
    return json.dumps(payload)


def _upsert_statement():
    stmt = sqlite_insert(WeatherCacheEntry.__table__)
    return stmt.on_conflict_do_update(
        index_elements=["latitude", "longitude", "forecast_date"],
        set_={
            "data": stmt.excluded.data,
            "fetched_at": stmt.excluded.fetched_at,
            "expires_at": stmt.excluded.expires_at,
        },
    )


def _bad_date(value) -> Result:
    return validation_error(
        f"Invalid forecast date: {value}. Expected YYYY-MM-DD.", "INVALID_DATE_FORMAT",
    )


class WeatherCacheRepository:
    def __init__(self, store: Store):
        self.store = store

    def _key_filter(self, query, lat: float, lon: float, forecast_date: date):
        return query.filter(
            WeatherCacheEntry.latitude == quantize_coordinate(lat),
            WeatherCacheEntry.longitude == quantize_coordinate(lon),
            WeatherCacheEntry.forecast_date == forecast_date,
        )

    def get(
        self, lat: float, lon: float, forecast_date: Union[date, str],
    ) -> Result[Optional[WeatherCacheEntryRead]]:
        """Return the cached row for the key regardless of expiry."""
        try:
            day = _as_date(forecast_date)
        except ValueError:
            return _bad_date(forecast_date)

        try:
            with self.store.session() as db:
                entry = self._key_filter(db.query(WeatherCacheEntry), lat, lon, day).first()
                return Result.ok(WeatherCacheEntryRead.model_validate(entry) if entry else None)
        except SQLAlchemyError as e:
            logger.warning(f"Weather cache read failed: {e}")
            return infrastructure_error(
                f"Failed to read weather cache: {e}", "WEATHER_CACHE_GET_ERROR",
            )

    def set(
        self,
        lat: float,
        lon: float,
        forecast_date: Union[date, str],
        payload: Payload,
        ttl: timedelta = DEFAULT_TTL,
    ) -> Result[WeatherCacheEntryRead]:
        """Insert or refresh one entry; ``expires_at = fetched_at + ttl``."""
        try:
            day = _as_date(forecast_date)
        except ValueError:
            return _bad_date(forecast_date)

        now = self.store.now()
        row = {
            "latitude": quantize_coordinate(lat),
            "longitude": quantize_coordinate(lon),
            "forecast_date": day,
            "data": _serialize(payload),
            "fetched_at": now,
            "expires_at": now + ttl,
        }
        try:
            with self.store.session() as db:
                db.execute(_upsert_statement(), row)
                db.commit()
                entry = self._key_filter(db.query(WeatherCacheEntry), lat, lon, day).one()
                return Result.ok(WeatherCacheEntryRead.model_validate(entry))
        except SQLAlchemyError as e:
            logger.warning(f"Weather cache write failed: {e}")
            return infrastructure_error(
                f"Failed to write weather cache: {e}", "WEATHER_CACHE_SET_ERROR",
                ["Check database permissions", "Ensure sufficient disk space"],
            )

    def set_many(
        self,
        lat: float,
        lon: float,
        entries: Iterable[tuple[Union[date, str], Payload]],
        ttl: timedelta = DEFAULT_TTL,
    ) -> Result[int]:
        """Write several dates for one location in a single transaction."""
        now = self.store.now()
        qlat, qlon = quantize_coordinate(lat), quantize_coordinate(lon)
        rows = []
        for forecast_date, payload in entries:
            try:
                day = _as_date(forecast_date)
            except ValueError:
                return _bad_date(forecast_date)
            rows.append({
                "latitude": qlat,
                "longitude": qlon,
                "forecast_date": day,
                "data": _serialize(payload),
                "fetched_at": now,
                "expires_at": now + ttl,
            })

        if not rows:
            return Result.ok(0)

        try:
            with self.store.session() as db:
                db.execute(_upsert_statement(), rows)
                db.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Weather cache batch write failed ({len(rows)} rows): {e}")
            return infrastructure_error(
                f"Failed to write weather cache: {e}", "WEATHER_CACHE_SET_ERROR",
                ["Check database permissions", "Ensure sufficient disk space"],
            )
        return Result.ok(len(rows))

    def is_expired(self, lat: float, lon: float, forecast_date: Union[date, str]) -> Result[bool]:
        """True when the entry is missing or ``expires_at`` is not in the future."""
        result = self.get(lat, lon, forecast_date)
        if not result.success:
            return result
        entry = result.data
        if entry is None:
            return Result.ok(True)
        return Result.ok(entry.expires_at <= self.store.now())

    def get_range(
        self,
        lat: float,
        lon: float,
        start: Union[date, str],
        end: Union[date, str],
    ) -> Result[list[WeatherCacheEntryRead]]:
        """Cached entries for one location with start <= date <= end, oldest date first."""
        try:
            start_day, end_day = _as_date(start), _as_date(end)
        except ValueError:
            return _bad_date(f"{start}..{end}")

        try:
            with self.store.session() as db:
                entries = (
                    db.query(WeatherCacheEntry)
                    .filter(
                        WeatherCacheEntry.latitude == quantize_coordinate(lat),
                        WeatherCacheEntry.longitude == quantize_coordinate(lon),
                        WeatherCacheEntry.forecast_date >= start_day,
                        WeatherCacheEntry.forecast_date <= end_day,
                    )
                    .order_by(WeatherCacheEntry.forecast_date)
                    .all()
                )
                return Result.ok([WeatherCacheEntryRead.model_validate(e) for e in entries])
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to read weather cache range: {e}", "WEATHER_CACHE_GET_ERROR",
            )

    def delete_expired(self) -> Result[int]:
        """Delete every entry whose ``expires_at`` has passed. Returns the count removed."""
        now = self.store.now()
        try:
            with self.store.session() as db:
                deleted = (
                    db.query(WeatherCacheEntry)
                    .filter(WeatherCacheEntry.expires_at < now)
                    .delete(synchronize_session=False)
                )
                db.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Weather cache cleanup failed: {e}")
            return infrastructure_error(
                f"Failed to clean weather cache: {e}", "WEATHER_CACHE_CLEANUP_ERROR",
            )
        return Result.ok(deleted)

    def count(self) -> Result[int]:
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.count(WeatherCacheEntry.id)).scalar() or 0)
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to count weather cache entries: {e}", "WEATHER_CACHE_COUNT_ERROR",
            )

    def last_write_time(self) -> Result[Optional[datetime]]:
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.max(WeatherCacheEntry.fetched_at)).scalar())
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to read weather cache write time: {e}", "WEATHER_CACHE_GET_ERROR",
            )
