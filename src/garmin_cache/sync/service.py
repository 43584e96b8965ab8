"""SyncService for incremental activity sync."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from garmin_cache.constants import SYNC_PAGE_SIZE, WATERMARK_COLUMN
from garmin_cache.exceptions import (
    FetchError,
    GarminCacheError,
    MissingCredentialsError,
    StoreError,
    SyncInProgressError,
)
from garmin_cache.store.schema import ACTIVITY_SCHEMA, SchemaColumn
from garmin_cache.sync.models import SyncResult
from garmin_cache.sync.source import ActivitySource, GarminConnectSource

if TYPE_CHECKING:
    from garmin_cache.config.settings import GarminCredentials
    from garmin_cache.store.core import ActivityStore

logger = logging.getLogger(__name__)

SourceFactory = Callable[["GarminCredentials"], ActivitySource]

_WATERMARK_FIELD: SchemaColumn = next(c for c in ACTIVITY_SCHEMA if c.name == WATERMARK_COLUMN)


def parse_activity_time(value: Any) -> datetime | None:
    """Parse a Garmin local timestamp ("2024-01-15 08:00:00" or ISO-8601).

    Returns None for missing or unparsable values. Offsets are dropped so
    that all comparisons happen between naive local times.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


class SyncService:
    """Incremental sync of activities from a remote source into the store.

    Each run pages through the remote newest-first and stops at the first
    activity that is not strictly newer than the store's watermark, so only
    new activities are downloaded. New activities are buffered and committed
    in one transaction at the end of the run; a failure on any page discards
    the buffer and leaves the watermark untouched.

    Known limitation: because the boundary is "not strictly newer", a
    remote correction to an activity that keeps its original start time is
    never pulled again.
    """

    def __init__(
        self,
        store: ActivityStore,
        credentials: GarminCredentials,
        source_factory: SourceFactory | None = None,
        page_size: int = SYNC_PAGE_SIZE,
    ):
        """Initialize the sync service.

        Args:
            store: Activity store to sync into.
            credentials: Remote account credentials, loaded once at startup.
            source_factory: Builds the remote source from credentials.
                Defaults to GarminConnectSource.
            page_size: Activities requested per page.
        """
        self.store = store
        self.credentials = credentials
        self.source_factory = source_factory or GarminConnectSource.from_credentials
        self.page_size = page_size
        self._lock = threading.Lock()
        self._schema_ready = False

    def run(self) -> SyncResult:
        """Run one incremental sync pass.

        Returns:
            SyncResult with the number of new activities and refreshed totals.

        Raises:
            MissingCredentialsError: If credentials are absent (no network call is made).
            StoreInitError: If the database cannot be created.
            AuthError: If the remote rejects the login.
            FetchError: If a page request fails; nothing is committed.
            StoreWriteError: If the batch commit fails; the batch is rolled back.
            StoreReadError: If the activities table cannot be read (e.g. stale layout).
            SyncInProgressError: If another sync is already running.
        """
        if not self._lock.acquire(blocking=False):
            raise SyncInProgressError("A sync is already in progress")
        try:
            return self._run_locked()
        finally:
            self._lock.release()

    def _run_locked(self) -> SyncResult:
        # Describes the current run only; written under the lock
        self._schema_ready = False
        missing = self.credentials.missing_fields()
        if missing:
            raise MissingCredentialsError(missing)

        self.store.ensure_schema()
        self._schema_ready = True

        source = self.source_factory(self.credentials)
        source.login()

        watermark = self.store.latest_watermark()
        logger.info(f"Starting activity sync (watermark={watermark or 'none'})")
        new_activities = self._collect_new_activities(source, parse_activity_time(watermark))

        if new_activities:
            self.store.upsert_batch(new_activities)

        result = SyncResult(
            new_activities_count=len(new_activities),
            total_activities=self.store.row_count(),
            latest_activity_date=self.store.latest_watermark(),
            schema_ready=True,
        )
        logger.info(
            f"Sync complete: {result.new_activities_count} new, "
            f"{result.total_activities} total"
        )
        return result

    def _collect_new_activities(
        self, source: ActivitySource, watermark: datetime | None
    ) -> list[dict[str, Any]]:
        """Page through the source until the watermark or an empty page is reached."""
        pending: list[dict[str, Any]] = []
        offset = 0

        while True:
            try:
                page = source.fetch_page(offset, self.page_size)
            except GarminCacheError:
                raise
            except Exception as e:
                raise FetchError(
                    f"Failed to fetch activities: {e}", offset=offset, limit=self.page_size
                ) from e

            if not page:
                break

            reached_watermark = False
            for activity in page:
                if not self._is_newer(activity, watermark):
                    reached_watermark = True
                    break
                pending.append(activity)

            logger.debug(f"Page at offset {offset}: {len(page)} fetched, {len(pending)} pending")
            if reached_watermark:
                break
            offset += self.page_size

        return pending

    @staticmethod
    def _is_newer(activity: Any, watermark: datetime | None) -> bool:
        if watermark is None:
            return True
        started = parse_activity_time(_WATERMARK_FIELD.extract(activity))
        # Activities without a usable start time cannot be placed; keep them
        if started is None:
            return True
        return started > watermark

    def sync(self) -> SyncResult:
        """Run a sync and report failures as a structured result instead of raising.

        Returns:
            SyncResult; on failure ``error``/``error_type`` are set and
            ``schema_ready`` tells whether the store itself is usable.
        """
        try:
            return self.run()
        except SyncInProgressError as e:
            # The schema flag belongs to the run that holds the lock
            logger.warning(f"Activity sync skipped: {e}")
            return SyncResult.failed(e)
        except GarminCacheError as e:
            logger.error(f"Activity sync failed: {e}")
            if not self._schema_ready:
                return SyncResult.failed(e)
            try:
                total = self.store.row_count()
                latest = self.store.latest_watermark()
            except StoreError as count_error:
                logger.warning(f"Could not read store totals after failed sync: {count_error}")
                return SyncResult.failed(e, schema_ready=True)
            return SyncResult.failed(
                e, schema_ready=True, total_activities=total, latest_activity_date=latest
            )
