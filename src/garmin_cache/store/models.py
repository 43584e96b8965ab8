"""Data models for the activity store."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TableSchema:
    """A table in the store and the SQL that defines it."""

    name: str
    definition: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"name": self.name, "definition": self.definition}
