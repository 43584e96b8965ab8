"""Incremental sync of Garmin activities into the local store."""

from garmin_cache.sync.models import SyncResult
from garmin_cache.sync.service import SyncService
from garmin_cache.sync.source import ActivitySource, GarminConnectSource

__all__ = [
    "ActivitySource",
    "GarminConnectSource",
    "SyncResult",
    "SyncService",
]
