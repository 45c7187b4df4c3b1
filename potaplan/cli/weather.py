"""Fetch cached weather forecasts or sweep expired cache entries."""

import argparse
import logging
import sys
from datetime import timedelta

from .common import (
    add_common_arguments, configure_logging, load_settings, open_store_or_exit,
    report_failure,
)
from ..adapters.weather_client import OpenMeteoClient
from ..core.weather_service import WeatherService
from ..repositories.weather_cache_repository import WeatherCacheRepository

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Weather forecast cache")
    add_common_arguments(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    fc = sub.add_parser("forecast", help="Show the forecast for a location")
    fc.add_argument("--lat", type=float, required=True)
    fc.add_argument("--lon", type=float, required=True)
    fc.add_argument("--date", default=None, help="YYYY-MM-DD (default: all available days)")

    sub.add_parser("cleanup", help="Delete expired cache entries")

    args = parser.parse_args(argv)

    cfg = load_settings(args.config)
    configure_logging(cfg, args.verbose)

    store = open_store_or_exit(cfg)
    try:
        service = WeatherService(
            WeatherCacheRepository(store),
            OpenMeteoClient(
                base_url=cfg.weather_api_url,
                timeout=cfg.request_timeout_sec,
                units=cfg.units,
            ),
            ttl=timedelta(hours=cfg.weather_cache_ttl_hours),
        )

        if args.command == "cleanup":
            result = service.cleanup_cache()
            if not result.success:
                report_failure(result.error)
                sys.exit(1)
            return

        if args.date:
            result = service.get_forecast(args.lat, args.lon, args.date)
        else:
            result = service.get_multi_day_forecast(args.lat, args.lon)
        if not result.success:
            report_failure(result.error)
            sys.exit(1)

        forecast = result.data
        if forecast.stale_warning:
            logger.warning(forecast.stale_warning)
        for day in forecast.forecasts:
            logger.info(
                f"{day.date}  {day.conditions:<24} hi {day.high_temp:.0f} lo {day.low_temp:.0f}  "
                f"precip {day.precipitation_chance:.0f}%  wind {day.wind_speed:.0f} {day.wind_direction}"
            )
    finally:
        store.close()


if __name__ == "__main__":
    main()
