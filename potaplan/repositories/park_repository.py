"""
Park persistence: lookup, search and idempotent upsert keyed on reference.

Writes go through SQLite ``INSERT ... ON CONFLICT(reference) DO UPDATE``
executed as a single Core executemany, so one ``upsert_many`` call lands
all of its rows in one transaction or none of them.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Union

from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from ..database import Store
from ..models import Park
from ..result import Result, infrastructure_error, validation_error
from ..schemas import ParkRead, ParkSearchResult, ParkUpsert

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50

# Columns overwritten on conflict (everything except the keys)
_KEY_COLUMNS = ("id", "reference")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _upsert_statement():
    table = Park.__table__
    stmt = sqlite_insert(table)
    return stmt.on_conflict_do_update(
        index_elements=["reference"],
        set_={
            col.name: stmt.excluded[col.name]
            for col in table.columns
            if col.name not in _KEY_COLUMNS
        },
    )


class ParkRepository:
    def __init__(self, store: Store):
        self.store = store

    def find_by_reference(self, reference: str) -> Result[Optional[ParkRead]]:
        ref = reference.strip().upper()
        try:
            with self.store.session() as db:
                park = db.query(Park).filter(Park.reference == ref).first()
                return Result.ok(ParkRead.model_validate(park) if park else None)
        except SQLAlchemyError as e:
            logger.warning(f"Park lookup failed for {ref}: {e}")
            return infrastructure_error(
                f"Failed to look up park {ref}: {e}", "PARK_FIND_ERROR",
                ["Check that the database file is readable"],
            )

    def find_all(self, limit: int = 100, offset: int = 0) -> Result[list[ParkRead]]:
        try:
            with self.store.session() as db:
                parks = (
                    db.query(Park)
                    .order_by(Park.reference)
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
                return Result.ok([ParkRead.model_validate(p) for p in parks])
        except SQLAlchemyError as e:
            logger.warning(f"Park listing failed: {e}")
            return infrastructure_error(f"Failed to list parks: {e}", "PARK_FIND_ERROR")

    def search(
        self,
        query: str = "",
        state: Optional[str] = None,
        country: Optional[str] = None,
        active_only: bool = False,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> Result[ParkSearchResult]:
        """Case-insensitive substring search on reference and name.

        Returns the requested page plus the total number of matches.
        """
        q = select(Park)
        if query.strip():
            pattern = f"%{_escape_like(query.strip())}%"
            q = q.where(or_(
                Park.reference.ilike(pattern, escape="\\"),
                Park.name.ilike(pattern, escape="\\"),
            ))
        if state:
            q = q.where(Park.state == state.strip().upper())
        if country:
            q = q.where(func.lower(Park.country) == country.strip().lower())
        if active_only:
            q = q.where(Park.is_active.is_(True))

        try:
            with self.store.session() as db:
                total = db.execute(
                    select(func.count()).select_from(q.subquery())
                ).scalar_one()
                parks = db.execute(
                    q.order_by(Park.name, Park.reference).limit(limit)
                ).scalars().all()
                return Result.ok(ParkSearchResult(
                    items=[ParkRead.model_validate(p) for p in parks],
                    total=total,
                ))
        except SQLAlchemyError as e:
            logger.warning(f"Park search failed for '{query}': {e}")
            return infrastructure_error(
                f"Failed to search parks: {e}", "PARK_SEARCH_ERROR",
                ["Check that the database file is readable"],
            )

    def _to_rows(
        self, records: Iterable[Union[ParkUpsert, dict]], now: datetime,
    ) -> list[dict]:
        rows = []
        for rec in records:
            if not isinstance(rec, ParkUpsert):
                rec = ParkUpsert.model_validate(rec)
            row = rec.model_dump()
            row["synced_at"] = now
            rows.append(row)
        # One row per reference; the last occurrence wins
        return list({row["reference"]: row for row in rows}.values())

    def upsert(self, record: Union[ParkUpsert, dict]) -> Result[ParkRead]:
        """Insert or fully overwrite one park, returning the stored row."""
        now = self.store.now()
        try:
            rows = self._to_rows([record], now)
        except ValidationError as e:
            return validation_error(f"Invalid park record: {e}", "PARK_VALIDATION_ERROR")

        try:
            with self.store.session() as db:
                db.execute(_upsert_statement(), rows[0])
                db.commit()
                park = db.query(Park).filter(Park.reference == rows[0]["reference"]).one()
                return Result.ok(ParkRead.model_validate(park))
        except SQLAlchemyError as e:
            logger.warning(f"Park upsert failed for {rows[0]['reference']}: {e}")
            return infrastructure_error(
                f"Failed to save park {rows[0]['reference']}: {e}",
                "PARK_UPSERT_ERROR",
                ["Check database permissions", "Ensure sufficient disk space"],
            )

    def upsert_many(self, records: Iterable[Union[ParkUpsert, dict]]) -> Result[int]:
        """Upsert a batch of parks in one transaction. Returns the number written."""
        now = self.store.now()
        try:
            rows = self._to_rows(records, now)
        except ValidationError as e:
            return validation_error(f"Invalid park record: {e}", "PARK_VALIDATION_ERROR")

        if not rows:
            return Result.ok(0)

        try:
            with self.store.session() as db:
                db.execute(_upsert_statement(), rows)
                db.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Batch park upsert failed ({len(rows)} rows): {e}")
            return infrastructure_error(
                f"Failed to save {len(rows)} parks: {e}",
                "PARK_BATCH_UPSERT_ERROR",
                ["Check database permissions", "Ensure sufficient disk space"],
            )

        logger.debug(f"Upserted {len(rows)} parks")
        return Result.ok(len(rows))

    def count(self) -> Result[int]:
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.count(Park.id)).scalar() or 0)
        except SQLAlchemyError as e:
            return infrastructure_error(f"Failed to count parks: {e}", "PARK_COUNT_ERROR")

    def last_sync_time(self) -> Result[Optional[datetime]]:
        """Most recent ``synced_at`` across all parks, or None when empty."""
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.max(Park.synced_at)).scalar())
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to read last sync time: {e}", "PARK_SYNC_TIME_ERROR",
            )

    last_write_time = last_sync_time
