"""Park model: one row per POTA reference, refreshed by sync and CSV import."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UTCDateTime, utcnow


class Park(Base):
    __tablename__ = "parks"
    __table_args__ = (
        Index("ix_parks_state", "state"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reference: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    grid_square: Mapped[Optional[str]] = mapped_column(String(10))
    state: Mapped[Optional[str]] = mapped_column(String(10))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    region: Mapped[Optional[str]] = mapped_column(String(100))
    park_type: Mapped[Optional[str]] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    pota_url: Mapped[Optional[str]] = mapped_column(String(200))
    park_metadata: Mapped[Optional[dict]] = mapped_column(JSON)
    synced_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    plans: Mapped[list["Plan"]] = relationship(
        back_populates="park", cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Park(reference={self.reference!r}, name={self.name!r})>"
