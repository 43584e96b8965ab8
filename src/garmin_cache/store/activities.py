"""Activity operations for the activity store.

Functions for the watermark, counts, batch upserts and schema introspection.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from garmin_cache.constants import ACTIVITIES_TABLE, WATERMARK_COLUMN
from garmin_cache.exceptions import StoreReadError, StoreWriteError
from garmin_cache.store.models import TableSchema
from garmin_cache.store.schema import ACTIVITY_SCHEMA, extract_row, upsert_sql

if TYPE_CHECKING:
    from garmin_cache.store.core import ActivityStore

logger = logging.getLogger(__name__)

# The primary key comes from the remote record; SQLite must never assign one
_PRIMARY_KEY_INDEX = next(
    i for i, col in enumerate(ACTIVITY_SCHEMA) if "PRIMARY KEY" in col.sql_type
)


def get_latest_watermark(store: ActivityStore) -> str | None:
    """Get the newest start_time_local across all activities.

    Args:
        store: The ActivityStore instance.

    Returns:
        The newest timestamp string, or None if the table is empty.

    Raises:
        StoreReadError: If the table cannot be read.
    """
    try:
        conn = store._get_connection()
        cursor = conn.execute(f"SELECT MAX({WATERMARK_COLUMN}) FROM {ACTIVITIES_TABLE}")
        row = cursor.fetchone()
    except sqlite3.Error as e:
        raise StoreReadError(f"Cannot read the sync watermark: {e}") from e
    return row[0] if row and row[0] is not None else None


def count_activities(store: ActivityStore) -> int:
    """Count cached activities.

    Args:
        store: The ActivityStore instance.

    Returns:
        Total row count of the activities table.

    Raises:
        StoreReadError: If the table cannot be read.
    """
    try:
        conn = store._get_connection()
        cursor = conn.execute(f"SELECT COUNT(*) FROM {ACTIVITIES_TABLE}")
        row = cursor.fetchone()
    except sqlite3.Error as e:
        raise StoreReadError(f"Cannot count activities: {e}") from e
    return int(row[0]) if row else 0


def upsert_activities(store: ActivityStore, records: Iterable[Mapping[str, Any] | Any]) -> int:
    """Insert or replace activities by primary key in a single transaction.

    Either every row commits or none does.

    Args:
        store: The ActivityStore instance.
        records: Remote activity records; mapped through the schema registry.

    Returns:
        Number of rows written.

    Raises:
        StoreWriteError: If any record has no id or any row fails; nothing is saved.
    """
    rows = [extract_row(record) for record in records]
    if not rows:
        return 0

    missing_ids = sum(1 for row in rows if row[_PRIMARY_KEY_INDEX] is None)
    if missing_ids:
        remote_key = ACTIVITY_SCHEMA[_PRIMARY_KEY_INDEX].remote_path
        raise StoreWriteError(
            f"{missing_ids} activity record(s) have no {remote_key}, batch not saved",
            record_count=len(rows),
        )

    try:
        with store._transaction() as conn:
            conn.executemany(upsert_sql(), rows)
    except Exception as e:
        raise StoreWriteError(
            f"Failed to save activities, batch rolled back: {e}", record_count=len(rows)
        ) from e

    logger.info(f"Saved {len(rows)} activities")
    return len(rows)


def get_table_definitions(store: ActivityStore) -> list[TableSchema]:
    """List the user tables in the store and their CREATE statements.

    Uses a read-only handle.

    Args:
        store: The ActivityStore instance.

    Returns:
        One TableSchema per table, internal sqlite_ tables excluded.
    """
    with store.readonly_connection() as conn:
        cursor = conn.execute(
            "SELECT name, sql FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [TableSchema(name=row["name"], definition=row["sql"]) for row in cursor.fetchall()]
