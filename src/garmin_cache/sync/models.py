"""Models for activity sync operations."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class SyncResult:
    """Result of one sync invocation. Not persisted."""

    new_activities_count: int = 0
    total_activities: int = 0
    latest_activity_date: str | None = None
    error: str | None = None
    error_type: str | None = None
    # False only when the failure happened before the activities table was ready
    schema_ready: bool = False

    @property
    def success(self) -> bool:
        """Whether the sync completed without error."""
        return self.error is None

    @classmethod
    def failed(
        cls,
        error: Exception,
        schema_ready: bool = False,
        total_activities: int = 0,
        latest_activity_date: str | None = None,
    ) -> "SyncResult":
        """Build a failed result from the exception that ended the run."""
        return cls(
            new_activities_count=0,
            total_activities=total_activities,
            latest_activity_date=latest_activity_date,
            error=str(error),
            error_type=type(error).__name__,
            schema_ready=schema_ready,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data = asdict(self)
        data["success"] = self.success
        return data
