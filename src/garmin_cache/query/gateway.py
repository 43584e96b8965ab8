"""Read-only query gateway over the activity store."""

from __future__ import annotations

import logging
import sqlite3
import time
from typing import TYPE_CHECKING, Any

from garmin_cache.constants import (
    QUERY_MAX_CHARS,
    QUERY_MAX_ROWS,
    QUERY_PROGRESS_INTERVAL,
    QUERY_TIMEOUT_SECONDS,
)
from garmin_cache.exceptions import (
    QueryExecutionError,
    QueryRejected,
    QueryRejectionReason,
)
from garmin_cache.query.models import QueryResult
from garmin_cache.query.validation import validate_query

if TYPE_CHECKING:
    from garmin_cache.store.core import ActivityStore
    from garmin_cache.store.models import TableSchema

logger = logging.getLogger(__name__)

# 33 in sqlite3.h; older Python builds do not export the constant
_SQLITE_RECURSIVE = getattr(sqlite3, "SQLITE_RECURSIVE", 33)

_READ_ACTIONS: frozenset[int] = frozenset(
    {sqlite3.SQLITE_SELECT, sqlite3.SQLITE_READ, sqlite3.SQLITE_FUNCTION, _SQLITE_RECURSIVE}
)


class _ReadOnlyAuthorizer:
    """SQLite authorizer that denies every action other than reading data.

    Records the first denied action so a denial can be reported as a
    rejection instead of an engine error.
    """

    def __init__(self) -> None:
        self.denied_action: int | None = None

    def __call__(
        self,
        action: int,
        arg1: str | None,
        arg2: str | None,
        db_name: str | None,
        source: str | None,
    ) -> int:
        if action in _READ_ACTIONS:
            return sqlite3.SQLITE_OK
        if self.denied_action is None:
            self.denied_action = action
        return sqlite3.SQLITE_DENY


class _Deadline:
    """Progress handler that interrupts a statement once its time budget is spent."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds
        self.expired = False

    def __call__(self) -> int:
        if time.monotonic() > self.expires_at:
            self.expired = True
            return 1
        return 0


class QueryGateway:
    """Validates and executes caller-supplied read-only queries.

    Every call opens its own read-only handle, so queries never hold a
    write lock and never see a half-written sync batch.
    """

    def __init__(
        self,
        store: ActivityStore,
        max_query_chars: int = QUERY_MAX_CHARS,
        max_rows: int = QUERY_MAX_ROWS,
        timeout_seconds: float = QUERY_TIMEOUT_SECONDS,
    ):
        """Initialize the gateway.

        Args:
            store: Store to query.
            max_query_chars: Longest accepted query text.
            max_rows: Rows returned at most; extra rows are dropped with a warning.
            timeout_seconds: Time budget per query.
        """
        self.store = store
        self.max_query_chars = max_query_chars
        self.max_rows = max_rows
        self.timeout_seconds = timeout_seconds

    def get_schema(self) -> list[TableSchema]:
        """Return the definitions of the store's tables."""
        return self.store.get_table_definitions()

    def run_query(self, text: str) -> list[dict[str, Any]]:
        """Run a read-only query and return its rows.

        Use ``execute`` when the caller must know whether the row cap applied.
        """
        return self.execute(text).rows

    def execute(self, text: str) -> QueryResult:
        """Run a read-only query.

        Args:
            text: Caller-supplied query (one SELECT or WITH ... SELECT statement).

        Returns:
            QueryResult with rows as column-name -> value mappings, in the
            order the engine produced them, and the truncation flag.

        Raises:
            QueryRejected: If validation fails or the engine reports a non-read action.
            QueryExecutionError: If the engine fails or the time budget is exceeded.
            StoreNotFoundError: If the database has not been created yet.
        """
        statement = validate_query(text, self.max_query_chars)

        with self.store.readonly_connection() as conn:
            authorizer = _ReadOnlyAuthorizer()
            deadline = _Deadline(self.timeout_seconds)
            conn.set_authorizer(authorizer)
            conn.set_progress_handler(deadline, QUERY_PROGRESS_INTERVAL)

            try:
                cursor = conn.execute(statement)
                if cursor.description is None:
                    raise QueryRejected(
                        "Only SELECT queries are allowed (statement returns no rows).",
                        QueryRejectionReason.NOT_READ_ONLY,
                    )
                columns = [desc[0] for desc in cursor.description]
                rows = cursor.fetchmany(self.max_rows + 1)
            except sqlite3.Error as e:
                if authorizer.denied_action is not None:
                    raise QueryRejected(
                        "Only SELECT queries are allowed (statement is not read-only).",
                        QueryRejectionReason.NOT_READ_ONLY,
                    ) from e
                if deadline.expired:
                    raise QueryExecutionError(
                        f"Query exceeded the time limit of {self.timeout_seconds:g} seconds.",
                        {"timeout_seconds": self.timeout_seconds},
                    ) from e
                raise QueryExecutionError(f"Query failed: {e}") from e

        truncated = len(rows) > self.max_rows
        if truncated:
            logger.warning(f"Query result truncated to {self.max_rows} rows")
            rows = rows[: self.max_rows]

        return QueryResult(
            rows=[dict(zip(columns, tuple(row), strict=True)) for row in rows],
            truncated=truncated,
            row_limit=self.max_rows,
        )
