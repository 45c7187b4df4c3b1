"""Forecast cache entries keyed by quantized coordinates and date."""

from datetime import date, datetime

from sqlalchemy import Date, Float, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime


class WeatherCacheEntry(Base):
    __tablename__ = "weather_cache"
    __table_args__ = (
        UniqueConstraint(
            "latitude", "longitude", "forecast_date", name="uq_weather_cache_key",
        ),
        Index("ix_weather_cache_expires_at", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    forecast_date: Mapped[date] = mapped_column(Date, nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)  # JSON DailyForecast
    fetched_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<WeatherCacheEntry(lat={self.latitude}, lon={self.longitude}, "
            f"date={self.forecast_date})>"
        )
