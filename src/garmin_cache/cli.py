"""Main CLI entry point for garmin-cache."""

import json
import logging
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.syntax import Syntax
from rich.table import Table

from garmin_cache import __version__
from garmin_cache.config.settings import load_settings
from garmin_cache.constants import (
    EMPTY_QUERY_RESULT_MESSAGE,
    OUTPUT_FORMATS,
    TRUNCATED_RESULT_MESSAGE,
)
from garmin_cache.exceptions import GarminCacheError
from garmin_cache.tools.operations import ToolOperations
from garmin_cache.utils import (
    get_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

# Load .env file from current directory if it exists
load_dotenv(Path.cwd() / ".env", verbose=False)

app = typer.Typer(
    name="garmin-cache",
    help="Local, queryable cache of Garmin Connect activities.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = get_console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Sync Garmin activities into SQLite and query them safely."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _get_operations() -> ToolOperations:
    """Load settings and wire the operations, exiting on invalid configuration."""
    try:
        settings = load_settings()
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e
    return ToolOperations.from_settings(settings)


def _check_format(format_output: str) -> None:
    if format_output not in OUTPUT_FORMATS:
        print_error(
            f"Unknown format '{format_output}' (expected one of: {', '.join(OUTPUT_FORMATS)})"
        )
        raise typer.Exit(code=1)


@app.command("sync")
def sync() -> None:
    """Download activities newer than the newest cached one."""
    operations = _get_operations()
    result = operations.sync()

    if not result.success:
        print_error(f"Error syncing activities: {result.error}")
        if result.schema_ready:
            print_info(
                f"Database is ready ({result.total_activities} activities cached); "
                "only the sync failed."
            )
        raise typer.Exit(code=1)

    if result.new_activities_count > 0:
        print_success(f"Successfully synced {result.new_activities_count} new activities.")
    else:
        print_success("No new activities found. Database is up to date.")
    console.print(f"Total activities: {result.total_activities}")
    if result.latest_activity_date:
        console.print(f"Latest activity: {result.latest_activity_date}")


@app.command("schema")
def schema(
    format_output: str = typer.Option(
        "text", "--format", "-f", help="Output format: 'json' or 'text'"
    ),
) -> None:
    """Show the tables in the local cache."""
    _check_format(format_output)
    operations = _get_operations()
    try:
        tables = operations.get_schema()
    except GarminCacheError as e:
        print_error(f"Error fetching schema: {e}")
        raise typer.Exit(code=1) from e

    if format_output == "json":
        console.print_json(json.dumps([t.to_dict() for t in tables]))
        return

    if not tables:
        print_warning("No tables found. Run a sync to create the activities table.")
        return

    for table in tables:
        console.print(f"[bold]Table: {table.name}[/bold]")
        console.print(Syntax(table.definition, "sql", word_wrap=True))


@app.command("query")
def query(
    sql: str = typer.Argument(..., help="SELECT query to run against the cache"),
    format_output: str = typer.Option(
        "text", "--format", "-f", help="Output format: 'json' or 'text'"
    ),
) -> None:
    """Run a read-only SELECT query against the cache.

    Examples:
        garmin-cache query "SELECT activity_name, distance FROM activities LIMIT 5"
        garmin-cache query "SELECT COUNT(*) AS runs FROM activities" -f json
    """
    _check_format(format_output)
    operations = _get_operations()
    try:
        result = operations.query(sql)
    except GarminCacheError as e:
        print_error(f"Error running query: {e}")
        raise typer.Exit(code=1) from e

    rows = result.rows
    truncation_note = (
        TRUNCATED_RESULT_MESSAGE.format(limit=result.row_limit) if result.truncated else None
    )

    if format_output == "json":
        console.print_json(json.dumps(rows, default=str))
        # Keep stdout parseable
        if truncation_note:
            print_warning(truncation_note, err=True)
        return

    if not rows:
        console.print(EMPTY_QUERY_RESULT_MESSAGE)
        return

    table = Table(show_header=True, header_style="bold")
    for column in rows[0]:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if value is None else str(value) for value in row.values()))
    console.print(table)
    console.print(f"({len(rows)} row{'s' if len(rows) != 1 else ''})")
    if truncation_note:
        print_warning(truncation_note)


@app.command("mcp")
def mcp(
    transport: str = typer.Option(
        "stdio", "--transport", "-t", help="Transport: 'stdio', 'sse' or 'streamable-http'"
    ),
) -> None:
    """Serve the cache over MCP (get-schema, run-query, sync-activities)."""
    from garmin_cache.mcp.server import MCPTransport, run_mcp_server

    if transport not in ("stdio", "sse", "streamable-http"):
        print_error(f"Unknown transport '{transport}'")
        raise typer.Exit(code=1)

    try:
        settings = load_settings()
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    transport_value: MCPTransport = transport  # type: ignore[assignment]
    try:
        run_mcp_server(settings, transport=transport_value)
    except GarminCacheError as e:
        print_error(f"Failed to start server: {e}")
        raise typer.Exit(code=1) from e


@app.command("version")
def version() -> None:
    """Show the installed version."""
    console.print(f"garmin-cache {__version__}")


if __name__ == "__main__":
    app()
