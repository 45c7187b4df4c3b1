"""
Streaming CSV import of park data (POTA ``all_parks_ext.csv`` layout).

The file is read one line at a time and never held in memory. Valid rows
accumulate into fixed-size batches, each committed through
``ParkRepository.upsert_many`` in its own transaction. A failed batch
aborts the import; batches already committed stay committed.

Column order:
    reference,name,active,latitude,longitude,grid,entityId,locationDesc
"""

import csv
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from .grid_square import calculate_grid_square
from .normalizer import build_pota_url, extract_state_from_location
from ..repositories.park_repository import ParkRepository
from ..result import AppError, ErrorKind, Result
from ..schemas import CsvImportResult, CsvImportWarning, ParkUpsert

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

CSV_FIELDS = [
    "reference", "name", "active", "latitude", "longitude",
    "grid", "entityId", "locationDesc",
]

# Warning categories
INVALID_ROW = "invalid_row"
PLACEHOLDER_COORDINATES = "placeholder_coordinates"

ProgressCallback = Callable[[int, Optional[int]], None]


def parse_csv_line(line: str) -> dict:
    """Split one line into the positional record, padding missing fields.

    Quoted fields may contain commas and doubled quotes.
    """
    values = next(csv.reader([line]), [])
    row = {name: (values[i] if i < len(values) else "") for i, name in enumerate(CSV_FIELDS)}
    if len(values) < 3:
        row["active"] = "1"
    return row


def _parse_float(value: str) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if f != f else f


def validate_csv_row(row: dict, line_number: int) -> tuple[bool, list[CsvImportWarning]]:
    """Check required fields and coordinate ranges.

    Returns ``(valid, warnings)``. A (0, 0) location is valid but produces
    a placeholder warning.
    """
    warnings = []
    reference = row["reference"].strip()

    if not reference:
        warnings.append(CsvImportWarning(
            line_number=line_number, message="Missing required field: reference",
        ))
        return False, warnings

    if not row["name"].strip():
        warnings.append(CsvImportWarning(
            line_number=line_number,
            message=f"Missing required field: name for park {reference}",
        ))
        return False, warnings

    lat = _parse_float(row["latitude"])
    lon = _parse_float(row["longitude"])
    if lat is None or lon is None:
        warnings.append(CsvImportWarning(
            line_number=line_number,
            message=(
                f"Invalid coordinates for park {reference}: "
                f"lat={row['latitude']}, lon={row['longitude']}"
            ),
        ))
        return False, warnings

    if lat == 0 and lon == 0:
        warnings.append(CsvImportWarning(
            line_number=line_number,
            message=f"Park {reference} has coordinates at (0,0) - may be a placeholder",
            category=PLACEHOLDER_COORDINATES,
        ))

    if not -90 <= lat <= 90:
        warnings.append(CsvImportWarning(
            line_number=line_number, message=f"Invalid latitude for park {reference}: {lat}",
        ))
        return False, warnings

    if not -180 <= lon <= 180:
        warnings.append(CsvImportWarning(
            line_number=line_number, message=f"Invalid longitude for park {reference}: {lon}",
        ))
        return False, warnings

    return True, warnings


def transform_csv_row(row: dict, line_number: int) -> ParkUpsert:
    """Map a validated row onto the upsert shape used by sync."""
    lat = float(row["latitude"])
    lon = float(row["longitude"])
    reference = row["reference"].strip().upper()
    grid = row["grid"].strip()

    return ParkUpsert(
        reference=reference,
        name=row["name"].strip(),
        latitude=lat,
        longitude=lon,
        grid_square=grid or calculate_grid_square(lat, lon),
        state=extract_state_from_location(row["locationDesc"]),
        is_active=row["active"].strip() == "1",
        pota_url=build_pota_url(reference),
        park_metadata={
            "entityId": row["entityId"] or None,
            "locationDesc": row["locationDesc"] or None,
            "source": "csv-import",
            "importLineNumber": line_number,
        },
    )


def _batch_failure(message: str) -> Result:
    return Result.fail(AppError(
        message,
        "CSV_IMPORT_BATCH_ERROR",
        ErrorKind.INFRASTRUCTURE,
        ["Check database permissions", "Ensure sufficient disk space"],
    ))


def import_parks_from_csv(
    parks: ParkRepository,
    file_path: Union[str, Path],
    batch_size: int = DEFAULT_BATCH_SIZE,
    strict: bool = False,
    show_warnings: bool = False,
    on_progress: Optional[ProgressCallback] = None,
) -> Result[CsvImportResult]:
    """Import parks from a CSV file.

    Args:
        parks: Repository the batches are written through.
        file_path: CSV file; the first line is a header.
        batch_size: Rows per transaction.
        strict: Abort on the first invalid row instead of skipping it.
        show_warnings: Include placeholder-coordinate warnings in the result.
        on_progress: Called as ``(imported_so_far, None)`` after each full batch.

    Returns:
        Result with imported/skipped counts, warnings and elapsed milliseconds.
    """
    path = Path(file_path)
    if not path.is_file():
        return Result.fail(AppError(
            f"CSV file not found: {path}",
            "CSV_FILE_NOT_FOUND",
            ErrorKind.VALIDATION,
            ["Verify the file path is correct"],
        ))

    batch_size = max(1, int(batch_size))
    start = time.monotonic()
    warnings: list[CsvImportWarning] = []
    batch: list[ParkUpsert] = []
    imported = 0
    skipped = 0

    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            for line_number, line in enumerate(f, start=1):
                if line_number == 1:
                    continue  # header
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue

                row = parse_csv_line(line)
                valid, row_warnings = validate_csv_row(row, line_number)
                warnings.extend(row_warnings)

                if not valid:
                    skipped += 1
                    if strict:
                        return Result.fail(AppError(
                            f"Import failed at line {line_number}: {row_warnings[0].message}",
                            "CSV_IMPORT_STRICT_ERROR",
                            ErrorKind.VALIDATION,
                            ["Fix the CSV data", "Remove --strict to skip invalid rows"],
                        ))
                    logger.debug(f"Skipped line {line_number}: {row_warnings[0].message}")
                    continue

                batch.append(transform_csv_row(row, line_number))

                if len(batch) >= batch_size:
                    written = parks.upsert_many(batch)
                    if not written.success:
                        logger.error(f"Batch ending at line {line_number} failed: {written.error}")
                        return _batch_failure(
                            f"Failed to import batch at line {line_number}: {written.error.message}"
                        )
                    imported += len(batch)
                    batch = []
                    logger.debug(f"Committed batch; {imported} parks imported so far")
                    if on_progress:
                        on_progress(imported, None)

        if batch:
            written = parks.upsert_many(batch)
            if not written.success:
                logger.error(f"Final batch failed: {written.error}")
                return _batch_failure(f"Failed to import final batch: {written.error.message}")
            imported += len(batch)

    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"CSV import of {path} failed: {e}")
        return Result.fail(AppError(
            f"Failed to import CSV file: {e}",
            "CSV_IMPORT_ERROR",
            ErrorKind.INFRASTRUCTURE,
            [
                "Verify the file path is correct",
                "Check file permissions",
                "Ensure the file is valid CSV format",
            ],
        ))

    if not show_warnings:
        warnings = [w for w in warnings if w.category != PLACEHOLDER_COORDINATES]

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(f"Imported {imported} parks from {path.name} ({skipped} skipped) in {duration_ms}ms")
    return Result.ok(CsvImportResult(
        imported=imported,
        skipped=skipped,
        warnings=warnings,
        duration_ms=duration_ms,
    ))
