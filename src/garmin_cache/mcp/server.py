"""MCP Protocol Server for garmin-cache.

Exposes the activity cache to AI agents over MCP:
- get-schema: table definitions of the local cache
- run-query: gated read-only SQL against the cache
- sync-activities: incremental sync from Garmin Connect
"""

import logging
import sys
from typing import Literal, cast

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

# Force all logging to stderr to preserve stdout for the MCP protocol
logging.basicConfig(stream=sys.stderr, level=logging.INFO, force=True)

# These imports must be after logging setup to prevent stdout corruption
from garmin_cache.config.settings import Settings, load_settings  # noqa: E402
from garmin_cache.constants import (  # noqa: E402
    MCP_SERVER_NAME,
    TOOL_GET_SCHEMA,
    TOOL_RUN_QUERY,
    TOOL_SYNC_ACTIVITIES,
)
from garmin_cache.exceptions import GarminCacheError  # noqa: E402
from garmin_cache.tools.operations import ToolOperations  # noqa: E402

logger = logging.getLogger(__name__)


def create_mcp_server(operations: ToolOperations) -> FastMCP:
    """Create an MCP server exposing the cache operations.

    Args:
        operations: Wired tool operations.

    Returns:
        FastMCP server instance with the garmin-cache tools registered.
    """
    mcp = FastMCP(MCP_SERVER_NAME)

    @mcp.tool(
        name=TOOL_GET_SCHEMA,
        description="Fetches the schema of the available tables in the database.",
    )
    def get_schema() -> str:
        """Return the CREATE statements of every table in the activity cache."""
        try:
            return operations.describe_schema()
        except GarminCacheError as e:
            logger.warning(f"{TOOL_GET_SCHEMA} failed: {e}")
            raise ToolError(f"Error fetching schema: {e}") from e

    @mcp.tool(
        name=TOOL_RUN_QUERY,
        description="Runs a SELECT query against the database.",
    )
    def run_query(query: str) -> str:
        """Run one read-only SELECT (or WITH ... SELECT) statement.

        Args:
            query: The SELECT query to execute.

        Returns:
            Markdown table of the result rows.
        """
        try:
            return operations.execute_query({"query": query})
        except GarminCacheError as e:
            logger.warning(f"{TOOL_RUN_QUERY} failed: {e}")
            raise ToolError(f"Error running query: {e}") from e

    @mcp.tool(
        name=TOOL_SYNC_ACTIVITIES,
        description=(
            "Downloads and syncs new activities from Garmin Connect to the local database."
        ),
    )
    def sync_activities() -> str:
        """Sync activities newer than the newest cached one."""
        try:
            return operations.sync_activities()
        except GarminCacheError as e:
            logger.error(f"{TOOL_SYNC_ACTIVITIES} failed: {e}")
            raise ToolError(f"Error syncing activities: {e}") from e

    return mcp


MCPTransport = Literal["stdio", "sse", "streamable-http"]


def run_mcp_server(settings: Settings | None = None, transport: MCPTransport = "stdio") -> None:
    """Run the MCP server.

    The activities table is created before serving so that queries work
    before the first sync.

    Args:
        settings: Loaded settings; read from the environment when omitted.
        transport: Transport type ('stdio', 'sse', or 'streamable-http')
    """
    settings = settings or load_settings()
    operations = ToolOperations.from_settings(settings)
    operations.store.ensure_schema()
    logger.info(f"Activity database ready at {settings.cache.db_path}")

    mcp = create_mcp_server(operations)
    logger.info(f"{MCP_SERVER_NAME} running on {transport}")
    mcp.run(transport=transport)


if __name__ == "__main__":
    transport_arg = sys.argv[1] if len(sys.argv) > 1 else "stdio"
    run_mcp_server(transport=cast(MCPTransport, transport_arg))
