"""Input schemas for garmin-cache tools.

Pydantic models for validating tool inputs. Used by both the MCP handlers
and the CLI.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class QueryInput(BaseModel):
    """Input for the SQL query tool (run-query)."""

    query: str = Field(..., description="The SELECT query to execute.")
