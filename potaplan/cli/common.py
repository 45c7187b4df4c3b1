"""Helpers shared by the command-line entry points."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..config import Settings, settings as env_settings
from ..database import Store

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML settings file (default: POTA_* environment variables)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging",
    )


def load_settings(config_path: Optional[Path]) -> Settings:
    if config_path is not None:
        return Settings.from_yaml(config_path)
    return env_settings


def configure_logging(cfg: Settings, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


def open_store_or_exit(cfg: Settings) -> Store:
    opened = Store.open(cfg.database_url)
    if not opened.success:
        report_failure(opened.error)
        sys.exit(1)
    return opened.data


def report_failure(error) -> None:
    logger.error(error.message)
    for hint in error.suggestions:
        logger.error(f"  - {hint}")
