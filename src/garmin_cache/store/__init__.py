"""Activity store: SQLite cache of Garmin activities.

Modules:
- schema: Schema registry (column names, types, remote paths)
- models: Data models
- core: ActivityStore class with connection management
- activities: Watermark, count, upsert and introspection operations
"""

from garmin_cache.store.core import ActivityStore
from garmin_cache.store.models import TableSchema
from garmin_cache.store.schema import ACTIVITY_SCHEMA, SchemaColumn

__all__ = [
    "ACTIVITY_SCHEMA",
    "ActivityStore",
    "SchemaColumn",
    "TableSchema",
]
