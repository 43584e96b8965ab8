"""Core ActivityStore class for the activity cache.

Contains the main ActivityStore class with connection management and
delegation to the operation functions in ``activities``.
"""

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from garmin_cache.constants import DB_CONNECT_TIMEOUT_SECONDS
from garmin_cache.exceptions import StoreInitError, StoreNotFoundError
from garmin_cache.store import activities
from garmin_cache.store.models import TableSchema
from garmin_cache.store.schema import create_table_sql

logger = logging.getLogger(__name__)


class ActivityStore:
    """SQLite-based cache of Garmin activities.

    The read-write connection is thread-local and reused; it is only used by
    the sync engine. Queries go through ``readonly_connection()``, which
    opens a fresh handle in SQLite's read-only mode for every call so that
    no query can ever hold a write lock.
    """

    def __init__(self, db_path: Path):
        """Initialize the activity store.

        Does not touch the filesystem; call ``ensure_schema()`` before writing.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self._local = threading.local()

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local read-write database connection."""
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=DB_CONNECT_TIMEOUT_SECONDS,
            )
            self._local.conn.row_factory = sqlite3.Row
        conn: sqlite3.Connection = self._local.conn
        return conn

    @contextmanager
    def readonly_connection(self) -> Iterator[sqlite3.Connection]:
        """Open a fresh read-only connection, closed on every exit path.

        The handle is opened with ``mode=ro`` and ``query_only`` so that the
        file-access layer rejects writes independently of any validation
        done by the caller.

        Raises:
            StoreNotFoundError: If the database file does not exist.
        """
        if not self.db_path.exists():
            raise StoreNotFoundError(self.db_path)

        conn = sqlite3.connect(
            f"file:{self.db_path}?mode=ro",
            uri=True,
            timeout=DB_CONNECT_TIMEOUT_SECONDS,
        )
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA query_only = ON")
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database transaction error: {e}", exc_info=True)
            raise

    def ensure_schema(self) -> None:
        """Create the activities table if needed. Safe to call repeatedly.

        Raises:
            StoreInitError: If the directory or database file cannot be created.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreInitError(
                f"Cannot create database directory: {e}", path=self.db_path
            ) from e

        try:
            with self._transaction() as conn:
                conn.execute(create_table_sql())
        except sqlite3.Error as e:
            # A connection that failed to open must not be reused
            self.close()
            raise StoreInitError(
                f"Error creating activities table: {e}", path=self.db_path
            ) from e
        logger.debug(f"Activity store schema ready at {self.db_path}")

    def close(self) -> None:
        """Close the thread-local read-write connection."""
        if hasattr(self._local, "conn") and self._local.conn:
            self._local.conn.close()
            self._local.conn = None

    # ==========================================================================
    # Activity operations - delegate to activities module
    # ==========================================================================

    def latest_watermark(self) -> str | None:
        """Newest start_time_local in the store, or None when empty."""
        return activities.get_latest_watermark(self)

    def row_count(self) -> int:
        """Total number of cached activities."""
        return activities.count_activities(self)

    def upsert_batch(self, records: Iterable[Mapping[str, Any] | Any]) -> int:
        """Insert or replace a batch of remote records in one transaction."""
        return activities.upsert_activities(self, records)

    def get_table_definitions(self) -> list[TableSchema]:
        """List user tables and their CREATE statements."""
        return activities.get_table_definitions(self)
