"""MCP server exposing the activity cache to AI agents."""
