"""
Open-Meteo forecast client. Free API, no authentication.

Returns the raw daily response; normalization into DailyForecast rows
happens in core.weather_service.
"""

import logging
from typing import Optional

import requests

from .http import build_session, get_json
from ..result import Result, network_error, validation_error

logger = logging.getLogger(__name__)

BASE_URL = "https://api.open-meteo.com/v1/forecast"

DAILY_PARAMS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_probability_max",
    "windspeed_10m_max",
    "winddirection_10m_dominant",
    "weathercode",
    "sunrise",
    "sunset",
]

UNIT_PARAMS = {
    "imperial": {
        "temperature_unit": "fahrenheit",
        "windspeed_unit": "mph",
        "precipitation_unit": "inch",
    },
    "metric": {
        "temperature_unit": "celsius",
        "windspeed_unit": "kmh",
        "precipitation_unit": "mm",
    },
}


class OpenMeteoClient:
    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30,
        units: str = "imperial",
        session: Optional[requests.Session] = None,
    ):
        if units not in UNIT_PARAMS:
            raise ValueError(f"Unknown units '{units}'. Expected one of {list(UNIT_PARAMS)}")
        self.base_url = base_url
        self.timeout = timeout
        self.units = units
        self.session = session or build_session()

    def build_params(self, lat: float, lon: float) -> dict:
        return {
            "latitude": lat,
            "longitude": lon,
            "daily": ",".join(DAILY_PARAMS),
            "timezone": "auto",
            **UNIT_PARAMS[self.units],
        }

    def fetch_forecast(self, lat: float, lon: float) -> Result[dict]:
        """Fetch the daily forecast (7 days by default) for a location.

        Coordinates are range-checked before any request is made, and the
        response must carry a non-empty ``daily.time`` array.
        """
        if not -90 <= lat <= 90:
            return validation_error(
                f"Invalid latitude: {lat}. Must be between -90 and 90.",
                "INVALID_LATITUDE", ["Provide a valid latitude coordinate"],
            )
        if not -180 <= lon <= 180:
            return validation_error(
                f"Invalid longitude: {lon}. Must be between -180 and 180.",
                "INVALID_LONGITUDE", ["Provide a valid longitude coordinate"],
            )

        result = get_json(
            self.session, self.base_url, self.timeout,
            code_prefix="WEATHER_API", service="Open-Meteo API",
            params=self.build_params(lat, lon),
        )
        if not result.success:
            return result

        data = result.data
        daily = data.get("daily") if isinstance(data, dict) else None
        if not daily or not daily.get("time"):
            logger.warning(f"Open-Meteo response missing daily data for ({lat}, {lon})")
            return network_error(
                "Open-Meteo API returned invalid response structure",
                "WEATHER_API_INVALID_RESPONSE",
                ["Try again later", "The API may be experiencing issues"],
            )

        logger.debug(f"Fetched {len(daily['time'])} forecast days for ({lat}, {lon})")
        return Result.ok(data)
