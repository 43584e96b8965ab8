"""Custom exceptions for garmin-cache.

This module defines a hierarchy of exceptions for consistent error handling
across the project. All exceptions inherit from GarminCacheError, allowing
callers to catch every cache-related error with a single except clause.

Exception hierarchy:
    GarminCacheError (base)
    ├── ConfigurationError
    │   ├── MissingCredentialsError
    │   └── StoreInitError
    ├── AuthError
    ├── SyncError
    │   ├── FetchError
    │   └── SyncInProgressError
    ├── StoreError
    │   ├── StoreWriteError
    │   ├── StoreReadError
    │   └── StoreNotFoundError
    └── QueryError
        ├── QueryRejected
        └── QueryExecutionError
"""

from enum import Enum
from pathlib import Path
from typing import Any


class GarminCacheError(Exception):
    """Base exception for all garmin-cache errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize the error.

        Args:
            message: Error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GarminCacheError):
    """Raised when configuration is missing or unusable.

    Fatal for the current operation and never retried automatically.
    """

    def __init__(self, message: str, key: str | None = None, path: Path | None = None):
        details: dict[str, Any] = {}
        if key:
            details["key"] = key
        if path:
            details["path"] = str(path)
        super().__init__(message, details)
        self.key = key
        self.path = path


class MissingCredentialsError(ConfigurationError):
    """Raised when Garmin credentials are absent from the configuration."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing {' or '.join(missing)} in environment variables",
            key=", ".join(missing),
        )
        self.missing = missing


class StoreInitError(ConfigurationError):
    """Raised when the activity database cannot be created or opened for writing."""

    def __init__(self, message: str, path: Path):
        super().__init__(message, path=path)


# =============================================================================
# Remote Errors
# =============================================================================


class AuthError(GarminCacheError):
    """Raised when the remote provider rejects the login.

    The message carries actionable guidance: a credential mismatch is
    distinguished from a provider-side block (rate limiting, bot protection).
    """

    def __init__(self, message: str, provider_blocked: bool = False):
        super().__init__(message)
        self.provider_blocked = provider_blocked


class SyncError(GarminCacheError):
    """Raised when a sync run fails after credentials were accepted."""


class FetchError(SyncError):
    """Raised when a page request fails mid-pagination.

    The run's pending buffer is discarded, so retrying the whole sync later
    is safe: the watermark was never advanced.
    """

    def __init__(self, message: str, offset: int, limit: int):
        super().__init__(message, {"offset": offset, "limit": limit})
        self.offset = offset
        self.limit = limit


class SyncInProgressError(SyncError):
    """Raised when a sync is requested while another one is still running."""


# =============================================================================
# Storage Errors
# =============================================================================


class StoreError(GarminCacheError):
    """Base class for activity store errors."""


class StoreWriteError(StoreError):
    """Raised when a batch upsert fails and its transaction was rolled back."""

    def __init__(self, message: str, record_count: int):
        super().__init__(message, {"record_count": record_count})
        self.record_count = record_count


class StoreReadError(StoreError):
    """Raised when the store cannot be read, e.g. a stale table layout or a locked file."""


class StoreNotFoundError(StoreError):
    """Raised when a read-only handle is requested for a database that does not exist."""

    def __init__(self, path: Path):
        super().__init__(
            f"Database file not found at {path}. Run a sync first to create it.",
            {"path": str(path)},
        )
        self.path = path


# =============================================================================
# Query Errors
# =============================================================================


class QueryError(GarminCacheError):
    """Base class for query gateway errors."""


class QueryRejectionReason(str, Enum):
    """Why the query gateway refused to execute a query."""

    EMPTY = "empty"
    TOO_LARGE = "too_large"
    MULTIPLE_STATEMENTS = "multiple_statements"
    NOT_SELECT = "not_select"
    FORBIDDEN_KEYWORD = "forbidden_keyword"
    NOT_READ_ONLY = "not_read_only"


class QueryRejected(QueryError):
    """Raised when a query fails validation. Nothing was executed.

    Attributes:
        reason: The pipeline step that rejected the query.
    """

    def __init__(self, message: str, reason: QueryRejectionReason, keyword: str | None = None):
        details: dict[str, Any] = {"reason": reason.value}
        if keyword:
            details["keyword"] = keyword
        super().__init__(message, details)
        self.reason = reason
        self.keyword = keyword


class QueryExecutionError(QueryError):
    """Raised when a validated query fails inside the database engine."""
