"""
Park synchronization between the POTA API and the local store.

Sync is skipped when the last write is inside the resync cool-down
unless forced. Read paths get a staleness advisory once data is older
than ``stale_after``; it never blocks the read.
"""

import logging
from datetime import timedelta
from typing import Optional

from ..adapters.pota_client import PotaClient
from ..repositories.park_repository import ParkRepository
from ..result import AppError, ErrorKind, Result
from ..schemas import ParkRead, ParkSearchResult, SyncResult
from .normalizer import normalize_parks

logger = logging.getLogger(__name__)

RESYNC_COOLDOWN = timedelta(hours=1)
STALE_AFTER = timedelta(days=30)

NO_DATA_WARNING = 'No park data found. Run "pota sync" to download park information.'
RECENT_SYNC_WARNING = "Park data was synced recently. Use --force to sync again."


class ParkSyncService:
    def __init__(
        self,
        parks: ParkRepository,
        client: PotaClient,
        resync_cooldown: timedelta = RESYNC_COOLDOWN,
        stale_after: timedelta = STALE_AFTER,
    ):
        self.parks = parks
        self.client = client
        self.resync_cooldown = resync_cooldown
        self.stale_after = stale_after

    @property
    def store(self):
        return self.parks.store

    def get_stale_warning(self) -> Optional[str]:
        """Advisory for read paths: no data, stale data, or None when fresh."""
        last = self.parks.last_sync_time()
        if not last.success:
            return 'Unable to determine last sync time. Run "pota sync" to update park data.'
        if last.data is None:
            return NO_DATA_WARNING

        age = self.store.now() - last.data
        if age > self.stale_after:
            return f'Park data is {age.days} days old. Run "pota sync" to refresh.'
        return None

    def sync_parks(self, region: Optional[str] = None, force: bool = False) -> Result[SyncResult]:
        """Fetch all parks, filter by region, and upsert them in one transaction."""
        if not force:
            last = self.parks.last_sync_time()
            if last.success and last.data is not None:
                if self.store.now() - last.data < self.resync_cooldown:
                    count = self.parks.count()
                    logger.info("Park data synced recently; skipping remote fetch")
                    return Result.ok(SyncResult(
                        count=count.data if count.success else 0,
                        stale_warning=RECENT_SYNC_WARNING,
                    ))

        fetched = self.client.fetch_all_parks()
        if not fetched.success:
            err = fetched.error
            logger.warning(f"Park sync fetch failed: {err}")
            return Result.fail(AppError(
                f"Failed to fetch parks from POTA API: {err.message}",
                "PARK_SYNC_ERROR",
                err.kind,
                ["Check your internet connection", "Try again later"],
                err.status_code,
            ))

        raw = fetched.data or []
        if not isinstance(raw, list) or not all(isinstance(p, dict) for p in raw):
            return Result.fail(AppError(
                "Failed to fetch parks from POTA API: unexpected response shape",
                "PARK_SYNC_ERROR",
                ErrorKind.NETWORK,
                ["Try again later"],
            ))

        records = normalize_parks(raw, region=region)
        written = self.parks.upsert_many(records)
        if not written.success:
            err = written.error
            return Result.fail(AppError(
                f"Failed to store parks in database: {err.message}",
                "PARK_SYNC_ERROR",
                ErrorKind.INFRASTRUCTURE,
                ["Check database permissions", "Ensure sufficient disk space"],
            ))

        logger.info(f"Synced {written.data} parks" + (f" for region '{region}'" if region else ""))
        return Result.ok(SyncResult(count=written.data, stale_warning=self.get_stale_warning()))

    def search_parks(
        self,
        query: str,
        state: Optional[str] = None,
        country: Optional[str] = None,
        active_only: bool = False,
        limit: int = 50,
    ) -> Result[ParkSearchResult]:
        found = self.parks.search(
            query, state=state, country=country, active_only=active_only, limit=limit,
        )
        if not found.success:
            return found
        found.data.stale_warning = self.get_stale_warning()
        return found

    def get_park(self, reference: str) -> Result[Optional[ParkRead]]:
        """Local lookup first; on a miss fetch, store and return the remote record."""
        ref = reference.strip().upper()
        local = self.parks.find_by_reference(ref)
        if not local.success or local.data is not None:
            return local

        remote = self.client.fetch_park(ref)
        if not remote.success:
            err = remote.error
            return Result.fail(AppError(
                f"Failed to fetch park {ref}: {err.message}",
                "PARK_FETCH_ERROR",
                err.kind,
                ["Check your internet connection", "Verify the park reference is correct"],
                err.status_code,
            ))
        if remote.data is None:
            return Result.ok(None)

        if not isinstance(remote.data, dict):
            return Result.fail(AppError(
                f"Failed to fetch park {ref}: unexpected response shape",
                "PARK_FETCH_ERROR",
                ErrorKind.NETWORK,
                ["Try again later"],
            ))
        raw = dict(remote.data)
        raw.setdefault("reference", ref)
        records = normalize_parks([raw])
        if not records:
            return Result.fail(AppError(
                f"POTA API returned an incomplete record for park {ref}",
                "PARK_FETCH_ERROR",
                ErrorKind.VALIDATION,
                ["Try again later"],
            ))
        return self.parks.upsert(records[0])

    def get_park_count(self) -> Result[int]:
        return self.parks.count()

    def has_parks(self) -> bool:
        count = self.parks.count()
        return count.success and count.data > 0
