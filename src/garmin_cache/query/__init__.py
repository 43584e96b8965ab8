"""Safety-gated read-only query execution against the activity store."""

from garmin_cache.query.gateway import QueryGateway
from garmin_cache.query.models import QueryResult
from garmin_cache.query.validation import scrub_literals, validate_query

__all__ = ["QueryGateway", "QueryResult", "scrub_literals", "validate_query"]
