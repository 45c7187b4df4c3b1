"""SQLAlchemy ORM models."""

from .base import Base
from .park import Park
from .plan import Plan, PlanStatus
from .weather_cache import WeatherCacheEntry
