"""Import parks from a POTA CSV export (all_parks_ext.csv)."""

import argparse
import logging
import sys
from pathlib import Path

from .common import (
    add_common_arguments, configure_logging, load_settings, open_store_or_exit,
    report_failure,
)
from ..core.csv_importer import import_parks_from_csv
from ..repositories.park_repository import ParkRepository

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import park data from a CSV file")
    parser.add_argument("--file", required=True, type=Path, help="Path to the CSV file")
    parser.add_argument(
        "--batch-size", type=int, default=None,
        help="Rows per database transaction (default: config, 1000)",
    )
    parser.add_argument(
        "--strict", action="store_true", help="Abort on the first invalid row",
    )
    parser.add_argument(
        "--show-warnings", action="store_true",
        help="Include placeholder-coordinate warnings",
    )
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    cfg = load_settings(args.config)
    configure_logging(cfg, args.verbose)

    store = open_store_or_exit(cfg)
    try:
        result = import_parks_from_csv(
            ParkRepository(store),
            args.file,
            batch_size=args.batch_size or cfg.import_batch_size,
            strict=args.strict,
            show_warnings=args.show_warnings,
            on_progress=lambda n, _total: logger.info(f"  {n:,} parks imported..."),
        )
        if not result.success:
            report_failure(result.error)
            sys.exit(1)

        summary = result.data
        logger.info(
            f"Imported {summary.imported:,} parks, skipped {summary.skipped:,} "
            f"({summary.duration_ms}ms)"
        )
        for w in summary.warnings:
            logger.warning(f"  line {w.line_number}: {w.message}")
    finally:
        store.close()


if __name__ == "__main__":
    main()
