"""Pytest configuration and shared fixtures for garmin-cache tests.

Stores are real SQLite files under ``tmp_path``; the remote provider is
replaced by an in-memory, newest-first ``FakeActivitySource``.
"""

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from garmin_cache.config.settings import GarminCredentials
from garmin_cache.store.core import ActivityStore
from garmin_cache.sync.service import SyncService

GARMIN_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Anchor time used across sync tests ("T" in the scenarios)
BASE_TIME = datetime(2024, 1, 15, 8, 0, 0)


def make_activity(activity_id: int, start: datetime | None, **fields: Any) -> dict[str, Any]:
    """Build a remote activity record shaped like a Garmin Connect list entry."""
    record: dict[str, Any] = {
        "activityId": activity_id,
        "activityName": f"Activity {activity_id}",
        "startTimeLocal": start.strftime(GARMIN_TIME_FORMAT) if start else None,
        "activityType": {"typeId": 1, "typeKey": "running"},
        "distance": 5000.0 + activity_id,
        "duration": 1800,
        "averageHR": 145,
    }
    record.update(fields)
    return record


def newest_first(count: int, start: datetime = BASE_TIME, first_id: int = 1) -> list[dict[str, Any]]:
    """Build ``count`` activities one hour apart, newest first."""
    activities = [
        make_activity(first_id + i, start + timedelta(hours=i)) for i in range(count)
    ]
    return list(reversed(activities))


class FakeActivitySource:
    """In-memory ActivitySource serving pages from a newest-first list."""

    def __init__(
        self,
        activities: list[dict[str, Any]] | None = None,
        fail_at_offset: int | None = None,
    ):
        self.activities = list(activities or [])
        self.fail_at_offset = fail_at_offset
        self.calls: list[tuple[int, int]] = []
        self.logged_in = False

    def login(self) -> None:
        self.logged_in = True

    def fetch_page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        self.calls.append((offset, limit))
        if self.fail_at_offset is not None and offset >= self.fail_at_offset:
            raise ConnectionError("Connection reset by peer")
        return self.activities[offset : offset + limit]


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a not-yet-created database inside a nested data directory."""
    return tmp_path / "data" / "garmin-data.db"


@pytest.fixture
def store(db_path: Path) -> Iterator[ActivityStore]:
    """ActivityStore with the activities table created."""
    activity_store = ActivityStore(db_path)
    activity_store.ensure_schema()
    yield activity_store
    activity_store.close()


@pytest.fixture
def activity_factory() -> Callable[..., dict[str, Any]]:
    """Expose ``make_activity`` to tests."""
    return make_activity


@pytest.fixture
def activities_factory() -> Callable[..., list[dict[str, Any]]]:
    """Expose ``newest_first`` to tests."""
    return newest_first


# =============================================================================
# Sync Fixtures
# =============================================================================


@pytest.fixture
def credentials() -> GarminCredentials:
    """Complete test credentials."""
    return GarminCredentials(username="runner@example.com", password="hunter2")


@pytest.fixture
def fake_source() -> FakeActivitySource:
    """Empty fake source; tests assign ``activities`` as needed."""
    return FakeActivitySource()


@pytest.fixture
def source_factory(fake_source: FakeActivitySource) -> MagicMock:
    """Factory mock returning ``fake_source`` so calls can be asserted."""
    return MagicMock(return_value=fake_source)


@pytest.fixture
def sync_service(
    store: ActivityStore, credentials: GarminCredentials, source_factory: MagicMock
) -> SyncService:
    """SyncService wired to the temp store and the fake source."""
    return SyncService(store, credentials, source_factory=source_factory, page_size=100)
