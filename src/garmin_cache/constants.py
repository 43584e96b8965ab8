"""Constants for garmin-cache.

This module centralizes the magic strings and numbers used throughout the
project. Constants are organized by domain:
- Storage
- Sync
- Query gateway
- Tool / MCP names
"""

from typing import Final

# =============================================================================
# Storage
# =============================================================================

ACTIVITIES_TABLE: Final[str] = "activities"
DEFAULT_DATA_DIR: Final[str] = "data"
DEFAULT_DB_FILENAME: Final[str] = "garmin-data.db"
DB_CONNECT_TIMEOUT_SECONDS: Final[float] = 60.0

# Column used as the incremental sync watermark
WATERMARK_COLUMN: Final[str] = "start_time_local"

# =============================================================================
# Sync
# =============================================================================

SYNC_PAGE_SIZE: Final[int] = 100
ENV_GARMIN_USERNAME: Final[str] = "GARMIN_USERNAME"
ENV_GARMIN_PASSWORD: Final[str] = "GARMIN_PASSWORD"

# Third-party loggers that are capped so their chatter stays off the primary output
GARMIN_LIBRARY_LOGGERS: Final[tuple[str, ...]] = ("garminconnect", "garth")

# =============================================================================
# Query Gateway
# =============================================================================

QUERY_MAX_CHARS: Final[int] = 50_000
QUERY_MAX_ROWS: Final[int] = 10_000
QUERY_TIMEOUT_SECONDS: Final[float] = 30.0
# Number of SQLite VM instructions between progress handler callbacks
QUERY_PROGRESS_INTERVAL: Final[int] = 10_000

QUERY_ALLOWED_PREFIXES: Final[tuple[str, ...]] = ("select", "with")
QUERY_FORBIDDEN_KEYWORDS: Final[tuple[str, ...]] = (
    "insert",
    "update",
    "delete",
    "drop",
    "alter",
    "create",
    "attach",
    "detach",
    "pragma",
    "reindex",
    "vacuum",
    "replace",
    "analyze",
    "begin",
    "commit",
    "rollback",
    "savepoint",
    "release",
    "upsert",
)

# Markdown table cells longer than this are truncated
TABLE_CELL_MAX_CHARS: Final[int] = 200

# =============================================================================
# Tool / MCP
# =============================================================================

MCP_SERVER_NAME: Final[str] = "garmin-mcp-server"
TOOL_GET_SCHEMA: Final[str] = "get-schema"
TOOL_RUN_QUERY: Final[str] = "run-query"
TOOL_SYNC_ACTIVITIES: Final[str] = "sync-activities"

EMPTY_QUERY_RESULT_MESSAGE: Final[str] = "Query returned no results."
TRUNCATED_RESULT_MESSAGE: Final[str] = (
    "Results truncated to {limit} rows. Add a WHERE clause, LIMIT or aggregate to see the rest."
)

# =============================================================================
# CLI
# =============================================================================

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("text", "json")
