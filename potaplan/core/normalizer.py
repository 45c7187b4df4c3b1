"""
Park normalization pipeline.

Transforms raw POTA API park records into ParkUpsert rows. Handles
optional region filtering, coordinate coercion, grid locator derivation,
state code fallback from the location description, and canonical
detail URLs.
"""

import logging
import re
from typing import Optional

import pandas as pd

from .grid_square import calculate_grid_square
from ..schemas import ParkUpsert

logger = logging.getLogger(__name__)

POTA_PARK_URL = "https://pota.app/#/park/{reference}"

US_STATE_PATTERN = re.compile(r"US-([A-Z]{2})")

# Raw API fields the pipeline reads; missing ones are added as empty
RAW_COLUMNS = [
    "reference", "name", "latitude", "longitude", "grid", "state",
    "stateName", "entityId", "entityName", "locationDesc", "type", "isActive",
]


def build_pota_url(reference: str) -> str:
    return POTA_PARK_URL.format(reference=reference.strip().upper())


def extract_state_from_location(location_desc: Optional[str]) -> Optional[str]:
    """First US state code in a location description.

    ``"US-CA,US-NV"`` -> ``"CA"``; non-US descriptions such as ``"CA-ON"``
    yield None.
    """
    if not location_desc:
        return None
    match = US_STATE_PATTERN.search(location_desc)
    return match.group(1) if match else None


def filter_by_region(df: pd.DataFrame, region: str) -> pd.DataFrame:
    """Keep rows whose country or subregion contains ``region`` (any case),
    or whose state code equals it (any case)."""
    needle = region.strip().lower()
    if not needle or df.empty:
        return df

    entity = df["entityName"].fillna("").astype(str)
    state_name = df["stateName"].fillna("").astype(str)
    state = df["state"].fillna("").astype(str).str.lower()

    mask = (
        entity.str.contains(needle, case=False, regex=False)
        | state_name.str.contains(needle, case=False, regex=False)
        | (state == needle)
    )
    return df[mask]


def normalize_parks(raw: list[dict], region: Optional[str] = None) -> list[ParkUpsert]:
    """Full normalization pipeline for API park records.

    Steps:
        1. Frame the raw records, adding any missing source columns
        2. Filter by region if one is given
        3. Coerce coordinates; drop rows without reference, name or coordinates
        4. Build ParkUpsert rows (grid derived when absent, URL from reference)
    """
    if not raw:
        return []

    df = pd.DataFrame(raw)
    for col in RAW_COLUMNS:
        if col not in df.columns:
            df[col] = None

    if region:
        before = len(df)
        df = filter_by_region(df, region)
        logger.info(f"Region filter '{region}': {len(df)} of {before} parks kept")

    df = df.copy()
    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")
    df["reference"] = df["reference"].fillna("").astype(str).str.strip().str.upper()
    df["name"] = df["name"].fillna("").astype(str).str.strip()

    valid = (
        (df["reference"] != "")
        & (df["name"] != "")
        & df["latitude"].notna()
        & df["longitude"].notna()
    )
    dropped = int((~valid).sum())
    if dropped:
        logger.warning(f"Dropped {dropped} park records missing reference, name or coordinates")
    df = df[valid]

    return [normalize_park_record(rec) for rec in df.to_dict("records")]


def normalize_park_record(rec: dict) -> ParkUpsert:
    """Normalize one raw API record. Coordinates must already be numeric."""
    lat = float(rec["latitude"])
    lon = float(rec["longitude"])
    reference = str(rec["reference"]).strip().upper()
    location_desc = _safe_str(rec.get("locationDesc"))

    return ParkUpsert(
        reference=reference,
        name=str(rec["name"]).strip(),
        latitude=lat,
        longitude=lon,
        grid_square=_safe_str(rec.get("grid")) or calculate_grid_square(lat, lon),
        state=_safe_str(rec.get("state")) or extract_state_from_location(location_desc),
        country=_safe_str(rec.get("entityName")),
        region=_safe_str(rec.get("stateName")),
        park_type=_safe_str(rec.get("type")),
        is_active=_safe_bool(rec.get("isActive"), default=True),
        pota_url=build_pota_url(reference),
        park_metadata={
            "entityId": _safe_int(rec.get("entityId")),
            "locationDesc": location_desc,
            "source": "pota-api",
        },
    )


def _safe_str(val) -> Optional[str]:
    """Convert to stripped string, returning None for NaN/None/blank."""
    if val is None:
        return None
    if isinstance(val, float) and val != val:  # NaN
        return None
    s = str(val).strip()
    return None if s in ("None", "nan", "") else s


def _safe_int(val) -> Optional[int]:
    if val is None:
        return None
    try:
        f = float(val)
        if f != f:  # NaN
            return None
        return int(f)
    except (ValueError, TypeError):
        return None


def _safe_bool(val, default: bool) -> bool:
    if val is None or (isinstance(val, float) and val != val):
        return default
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes")
    return bool(val)
