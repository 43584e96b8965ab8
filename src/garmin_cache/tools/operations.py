"""Core tool operations for garmin-cache.

This module contains the caller-facing operations. The MCP handlers and
the CLI both delegate to these operations.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from garmin_cache.config.settings import Settings
from garmin_cache.query.gateway import QueryGateway
from garmin_cache.store.core import ActivityStore
from garmin_cache.sync.service import SourceFactory, SyncService
from garmin_cache.tools.formatting import (
    format_query_results,
    format_schema_results,
    format_sync_result,
)
from garmin_cache.tools.schemas import QueryInput

if TYPE_CHECKING:
    from garmin_cache.query.models import QueryResult
    from garmin_cache.store.models import TableSchema
    from garmin_cache.sync.models import SyncResult

logger = logging.getLogger(__name__)


class ToolOperations:
    """Caller-facing operations: sync, schema introspection and queries.

    The structured methods (``sync``, ``get_schema``, ``run_query``) return
    plain data; the text methods return markdown formatted for LLM
    consumption and raise GarminCacheError subclasses on failure.
    """

    def __init__(self, sync_service: SyncService, gateway: QueryGateway) -> None:
        """Initialize operations.

        Args:
            sync_service: SyncService for incremental sync.
            gateway: QueryGateway for schema and read-only queries.
        """
        self.sync_service = sync_service
        self.gateway = gateway

    @classmethod
    def from_settings(
        cls, settings: Settings, source_factory: SourceFactory | None = None
    ) -> ToolOperations:
        """Wire store, sync service and gateway from loaded settings."""
        store = ActivityStore(settings.cache.db_path)
        sync_service = SyncService(
            store,
            settings.garmin.credentials(),
            source_factory=source_factory,
            page_size=settings.cache.page_size,
        )
        gateway = QueryGateway(
            store,
            max_query_chars=settings.cache.max_query_chars,
            max_rows=settings.cache.max_query_rows,
            timeout_seconds=settings.cache.query_timeout_seconds,
        )
        return cls(sync_service, gateway)

    @property
    def store(self) -> ActivityStore:
        """The store shared by sync and queries."""
        return self.sync_service.store

    # Structured operations

    def sync(self) -> SyncResult:
        """Run one incremental sync; failures are reported in the result."""
        return self.sync_service.sync()

    def get_schema(self) -> list[TableSchema]:
        """Return table definitions."""
        return self.gateway.get_schema()

    def run_query(self, text: str) -> list[dict[str, Any]]:
        """Run a gated read-only query."""
        return self.gateway.run_query(text)

    def query(self, text: str) -> QueryResult:
        """Run a gated read-only query, keeping the row-cap flag."""
        return self.gateway.execute(text)

    # Text operations

    def sync_activities(self) -> str:
        """Run one incremental sync and summarize it.

        Raises:
            GarminCacheError: If the sync fails.
        """
        return format_sync_result(self.sync_service.run())

    def describe_schema(self) -> str:
        """Return the table definitions as markdown."""
        return format_schema_results(self.get_schema())

    def execute_query(self, args: dict[str, Any]) -> str:
        """Execute a read-only query and format the rows as a markdown table.

        Args:
            args: Query arguments (query).

        Raises:
            QueryRejected: If the query fails validation.
            QueryExecutionError: If the engine fails.
        """
        input_data = QueryInput(**args)
        result = self.query(input_data.query)
        logger.debug(f"Query returned {len(result.rows)} rows (truncated={result.truncated})")
        return format_query_results(
            result.rows, truncated_at=result.row_limit if result.truncated else None
        )
