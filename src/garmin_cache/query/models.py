"""Models for query gateway results."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class QueryResult:
    """Rows of one gated query plus whether the row cap cut them short."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    truncated: bool = False
    # The cap in force for this query; only meaningful when truncated
    row_limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"rows": self.rows, "truncated": self.truncated, "row_limit": self.row_limit}
