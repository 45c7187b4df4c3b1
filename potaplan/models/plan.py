"""Activation plan model. Each plan belongs to one park."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint, Date, Float, ForeignKey, Index, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UTCDateTime, utcnow


class PlanStatus(str, Enum):
    DRAFT = "draft"
    FINALIZED = "finalized"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Plan(Base):
    __tablename__ = "plans"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'finalized', 'completed', 'cancelled')",
            name="ck_plans_status",
        ),
        Index("ix_plans_planned_date", "planned_date"),
        Index("ix_plans_park_id", "park_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    park_id: Mapped[int] = mapped_column(
        ForeignKey("parks.id", ondelete="CASCADE"), nullable=False,
    )
    status: Mapped[str] = mapped_column(String(20), default=PlanStatus.DRAFT.value, nullable=False)
    planned_date: Mapped[date] = mapped_column(Date, nullable=False)
    planned_time: Mapped[Optional[str]] = mapped_column(String(5))  # HH:MM
    duration_hours: Mapped[Optional[float]] = mapped_column(Float)
    preset_id: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    weather_cache: Mapped[Optional[str]] = mapped_column(Text)  # JSON snapshot
    bands_cache: Mapped[Optional[str]] = mapped_column(Text)  # JSON snapshot
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    park: Mapped["Park"] = relationship(back_populates="plans")

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, park_id={self.park_id}, date={self.planned_date})>"
