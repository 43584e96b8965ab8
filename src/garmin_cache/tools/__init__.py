"""Caller-facing tool operations shared by the MCP server and the CLI."""

from garmin_cache.tools.operations import ToolOperations

__all__ = ["ToolOperations"]
