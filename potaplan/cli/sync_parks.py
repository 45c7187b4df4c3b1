"""Sync park data from the POTA API into the local database."""

import argparse
import logging
import sys
from datetime import timedelta

from .common import (
    add_common_arguments, configure_logging, load_settings, open_store_or_exit,
    report_failure,
)
from ..adapters.pota_client import PotaClient
from ..core.park_sync import ParkSyncService
from ..repositories.park_repository import ParkRepository

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Download POTA park data for offline use",
    )
    parser.add_argument(
        "--region", default=None,
        help="Keep only parks whose country, region or state matches (default: config)",
    )
    parser.add_argument(
        "--all-regions", action="store_true", help="Ignore the configured default region",
    )
    parser.add_argument(
        "--force", action="store_true", help="Sync even if data was refreshed recently",
    )
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    cfg = load_settings(args.config)
    configure_logging(cfg, args.verbose)
    region = None if args.all_regions else (args.region or cfg.default_region)

    store = open_store_or_exit(cfg)
    try:
        client = PotaClient(
            base_url=cfg.pota_api_base_url,
            timeout=cfg.request_timeout_sec,
            health_timeout=cfg.health_timeout_sec,
        )
        service = ParkSyncService(
            ParkRepository(store),
            client,
            resync_cooldown=timedelta(hours=cfg.resync_cooldown_hours),
            stale_after=timedelta(days=cfg.park_stale_days),
        )

        result = service.sync_parks(region=region, force=args.force)
        if not result.success:
            report_failure(result.error)
            sys.exit(1)

        logger.info(f"{result.data.count} parks available offline")
        if result.data.stale_warning:
            logger.warning(result.data.stale_warning)
    finally:
        store.close()


if __name__ == "__main__":
    main()
