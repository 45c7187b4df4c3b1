from .park_repository import ParkRepository
from .plan_repository import PlanRepository
from .weather_cache_repository import WeatherCacheRepository, quantize_coordinate
