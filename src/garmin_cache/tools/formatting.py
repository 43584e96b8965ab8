"""Result formatting functions for garmin-cache tools.

These functions convert raw results into markdown text suitable for LLM
consumption.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from garmin_cache.constants import (
    EMPTY_QUERY_RESULT_MESSAGE,
    TABLE_CELL_MAX_CHARS,
    TRUNCATED_RESULT_MESSAGE,
)

if TYPE_CHECKING:
    from garmin_cache.store.models import TableSchema
    from garmin_cache.sync.models import SyncResult


def _format_cell(value: Any, max_chars: int = TABLE_CELL_MAX_CHARS) -> str:
    cell = str(value) if value is not None else ""
    if len(cell) > max_chars:
        cell = cell[: max_chars - 3] + "..."
    # Pipes and newlines would break the table layout
    return cell.replace("|", "\\|").replace("\n", " ")


def format_query_results(rows: Sequence[dict[str, Any]], truncated_at: int | None = None) -> str:
    """Format query rows as a markdown table.

    Args:
        rows: Rows as column -> value mappings; columns are taken from the first row.
        truncated_at: Row cap that cut the result short, if any.

    Returns:
        Markdown table with a row-count footer (and a truncation note when
        the cap applied), or a "no results" message.
    """
    if not rows:
        return EMPTY_QUERY_RESULT_MESSAGE

    columns = list(rows[0].keys())
    lines = [
        "| " + " | ".join(columns) + " |",
        "| " + " | ".join("---" for _ in columns) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_format_cell(row.get(col)) for col in columns) + " |")

    lines.append("")
    lines.append(f"({len(rows)} row{'s' if len(rows) != 1 else ''})")
    if truncated_at is not None:
        lines.append(TRUNCATED_RESULT_MESSAGE.format(limit=truncated_at))
    return "\n".join(lines)


def format_schema_results(tables: Sequence[TableSchema]) -> str:
    """Format table definitions as markdown with SQL code fences."""
    if not tables:
        return "No tables found. Run a sync to create the activities table."

    return "\n\n".join(
        f"**Table: {table.name}**\n```sql\n{table.definition}\n```" for table in tables
    )


def format_sync_result(result: SyncResult) -> str:
    """Format a successful sync result."""
    if result.new_activities_count > 0:
        header = f"Successfully synced {result.new_activities_count} new activities."
    else:
        header = "No new activities found. Database is up to date."

    lines = [header, f"Total activities: {result.total_activities}"]
    if result.latest_activity_date:
        # start_time_local is "YYYY-MM-DD HH:MM:SS"; the date part is enough here
        lines.append(f"Latest activity: {result.latest_activity_date[:10]}")
    return "\n".join(lines)
