"""Pydantic models for engine inputs and outputs.

Read models are validated from ORM rows (``from_attributes``) so nothing
outside the repositories ever holds a live SQLAlchemy object.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .models.plan import PlanStatus


# ── Parks ──

class ParkRead(BaseModel):
    id: int
    reference: str
    name: str
    latitude: float
    longitude: float
    grid_square: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    park_type: Optional[str] = None
    is_active: bool = True
    pota_url: Optional[str] = None
    park_metadata: Optional[dict] = None
    synced_at: datetime

    class Config:
        from_attributes = True


class ParkUpsert(BaseModel):
    """Full park record as written by sync and import. ``synced_at`` is set by the store."""
    reference: str
    name: str
    latitude: float
    longitude: float
    grid_square: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    park_type: Optional[str] = None
    is_active: bool = True
    pota_url: Optional[str] = None
    park_metadata: Optional[dict] = None

    @field_validator("reference")
    @classmethod
    def normalize_reference(cls, v: str) -> str:
        return v.strip().upper()


class ParkSearchResult(BaseModel):
    items: list[ParkRead]
    total: int
    stale_warning: Optional[str] = None


class SyncResult(BaseModel):
    count: int
    stale_warning: Optional[str] = None


# ── Plans ──

class PlanRead(BaseModel):
    id: int
    park_id: int
    status: PlanStatus
    planned_date: date
    planned_time: Optional[str] = None
    duration_hours: Optional[float] = None
    preset_id: Optional[str] = None
    notes: Optional[str] = None
    weather_cache: Optional[str] = None
    bands_cache: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    park: Optional[ParkRead] = None

    class Config:
        from_attributes = True


class PlanCreate(BaseModel):
    park_reference: str
    planned_date: date
    planned_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    duration_hours: Optional[float] = Field(default=None, gt=0)
    preset_id: Optional[str] = None
    notes: Optional[str] = None
    status: PlanStatus = PlanStatus.DRAFT


class PlanUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied; ``None`` clears a field."""
    status: Optional[PlanStatus] = None
    planned_date: Optional[date] = None
    planned_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    duration_hours: Optional[float] = Field(default=None, gt=0)
    preset_id: Optional[str] = None
    notes: Optional[str] = None
    weather_cache: Optional[str] = None
    bands_cache: Optional[str] = None


# ── Weather ──

class WeatherCacheEntryRead(BaseModel):
    id: int
    latitude: float
    longitude: float
    forecast_date: date
    data: str
    fetched_at: datetime
    expires_at: datetime

    class Config:
        from_attributes = True


class DailyForecast(BaseModel):
    date: str
    high_temp: float
    low_temp: float
    precipitation_chance: float
    wind_speed: float
    wind_direction: str
    conditions: str
    sunrise: Optional[str] = None
    sunset: Optional[str] = None


class Location(BaseModel):
    lat: float
    lon: float


class WeatherForecast(BaseModel):
    location: Location
    fetched_at: datetime
    forecasts: list[DailyForecast]
    stale_warning: Optional[str] = None


# ── CSV import ──

class CsvImportWarning(BaseModel):
    line_number: int
    message: str
    category: str = "invalid_row"


class CsvImportResult(BaseModel):
    imported: int
    skipped: int
    warnings: list[CsvImportWarning]
    duration_ms: int
