"""Schema registry for the activity store.

The registry is the single source of truth for the ``activities`` table:
an ordered tuple of columns, each naming the local column, its SQLite type
and the dotted path used to pluck the value out of a Garmin activity record.
Both the CREATE TABLE statement and the upsert extraction are derived from
it, so tracking a new metric only requires appending an entry.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from garmin_cache.constants import ACTIVITIES_TABLE


@dataclass(frozen=True)
class SchemaColumn:
    """One column of the activities table.

    Attributes:
        name: Local column name.
        sql_type: SQLite column definition (type plus constraints).
        remote_path: Dotted path into the remote record, e.g. ``activityType.typeKey``.
    """

    name: str
    sql_type: str
    remote_path: str
    # Path segments are split once here, not on every record
    _segments: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        segments = tuple(self.remote_path.split(".")) if self.remote_path else ()
        object.__setattr__(self, "_segments", segments)

    @property
    def definition(self) -> str:
        """Column definition as it appears in CREATE TABLE."""
        return f"{self.name} {self.sql_type}"

    def extract(self, record: Any) -> Any:
        """Return this column's value from a remote record, or None if any segment is absent.

        Works on mappings (the JSON dicts Garmin returns) and on plain
        objects with attributes.
        """
        value = record
        for segment in self._segments:
            if value is None:
                return None
            if isinstance(value, Mapping):
                value = value.get(segment)
            else:
                value = getattr(value, segment, None)
        return value


ACTIVITY_SCHEMA: tuple[SchemaColumn, ...] = (
    SchemaColumn("activity_id", "INTEGER PRIMARY KEY", "activityId"),
    SchemaColumn("activity_name", "TEXT", "activityName"),
    SchemaColumn("description", "TEXT", "description"),
    SchemaColumn("start_time_local", "TEXT", "startTimeLocal"),
    SchemaColumn("start_time_gmt", "TEXT", "startTimeGMT"),
    SchemaColumn("end_time_gmt", "TEXT", "endTimeGMT"),
    SchemaColumn("begin_timestamp", "INTEGER", "beginTimestamp"),
    SchemaColumn("activity_type_key", "TEXT", "activityType.typeKey"),
    SchemaColumn("location_name", "TEXT", "locationName"),
    SchemaColumn("distance", "REAL", "distance"),
    SchemaColumn("duration", "INTEGER", "duration"),
    SchemaColumn("elapsed_duration", "INTEGER", "elapsedDuration"),
    SchemaColumn("moving_duration", "INTEGER", "movingDuration"),
    SchemaColumn("calories", "INTEGER", "calories"),
    SchemaColumn("average_hr", "INTEGER", "averageHR"),
    SchemaColumn("max_hr", "INTEGER", "maxHR"),
    SchemaColumn("lactate_threshold_bpm", "INTEGER", "lactateThresholdBpm"),
    SchemaColumn("lactate_threshold_speed", "REAL", "lactateThresholdSpeed"),
    SchemaColumn("vo2_max", "REAL", "vO2MaxValue"),
    SchemaColumn("avg_stride_length", "REAL", "avgStrideLength"),
    SchemaColumn("max_stride_length", "REAL", "maxStrideLength"),
    SchemaColumn("training_effect", "REAL", "trainingEffect"),
    SchemaColumn("anaerobic_training_effect", "REAL", "anaerobicTrainingEffect"),
    SchemaColumn("aerobic_training_effect", "REAL", "aerobicTrainingEffect"),
    SchemaColumn("avg_vertical_oscillation", "REAL", "avgVerticalOscillation"),
    SchemaColumn("avg_ground_contact_time", "INTEGER", "avgGroundContactTime"),
    SchemaColumn("vertical_ratio", "REAL", "verticalRatio"),
    SchemaColumn("avg_fractional_cadence", "REAL", "avgFractionalCadence"),
    SchemaColumn("max_fractional_cadence", "REAL", "maxFractionalCadence"),
    SchemaColumn("avg_power", "INTEGER", "avgPower"),
    SchemaColumn("max_power", "INTEGER", "maxPower"),
    SchemaColumn("grit", "REAL", "grit"),
    SchemaColumn("flow", "REAL", "flow"),
    SchemaColumn(
        "avg_running_cadence_spm", "INTEGER", "averageRunningCadenceInStepsPerMinute"
    ),
    SchemaColumn("max_running_cadence_spm", "INTEGER", "maxRunningCadenceInStepsPerMinute"),
    SchemaColumn("max_double_cadence", "REAL", "maxDoubleCadence"),
    SchemaColumn("max_vertical_speed", "REAL", "maxVerticalSpeed"),
    SchemaColumn("min_activity_lap_duration", "INTEGER", "minActivityLapDuration"),
    SchemaColumn("activity_training_load", "REAL", "activityTrainingLoad"),
    SchemaColumn("vigorous_intensity_minutes", "INTEGER", "vigorousIntensityMinutes"),
    SchemaColumn("moderate_intensity_minutes", "INTEGER", "moderateIntensityMinutes"),
    SchemaColumn("hr_time_in_zone_1", "INTEGER", "hrTimeInZone_1"),
    SchemaColumn("hr_time_in_zone_2", "INTEGER", "hrTimeInZone_2"),
    SchemaColumn("hr_time_in_zone_3", "INTEGER", "hrTimeInZone_3"),
    SchemaColumn("hr_time_in_zone_4", "INTEGER", "hrTimeInZone_4"),
    SchemaColumn("hr_time_in_zone_5", "INTEGER", "hrTimeInZone_5"),
    SchemaColumn("average_speed", "REAL", "averageSpeed"),
    SchemaColumn("max_speed", "REAL", "maxSpeed"),
    SchemaColumn("fastest_split_1000", "REAL", "fastestSplit_1000"),
    SchemaColumn("fastest_split_5000", "REAL", "fastestSplit_5000"),
    SchemaColumn("fastest_split_10000", "REAL", "fastestSplit_10000"),
    SchemaColumn("fastest_split_1609", "REAL", "fastestSplit_1609"),
    SchemaColumn("elevation_gain", "REAL", "elevationGain"),
    SchemaColumn("elevation_loss", "REAL", "elevationLoss"),
    SchemaColumn("max_elevation", "REAL", "maxElevation"),
    SchemaColumn("min_elevation", "REAL", "minElevation"),
    SchemaColumn("steps", "INTEGER", "steps"),
    SchemaColumn("lap_count", "INTEGER", "lapCount"),
)


def column_names(columns: Sequence[SchemaColumn] = ACTIVITY_SCHEMA) -> list[str]:
    """Return the local column names in registry order."""
    return [col.name for col in columns]


def create_table_sql(
    columns: Sequence[SchemaColumn] = ACTIVITY_SCHEMA, table: str = ACTIVITIES_TABLE
) -> str:
    """Build the idempotent CREATE TABLE statement for the registry."""
    body = ",\n    ".join(col.definition for col in columns)
    return f"CREATE TABLE IF NOT EXISTS {table} (\n    {body}\n)"


def upsert_sql(
    columns: Sequence[SchemaColumn] = ACTIVITY_SCHEMA, table: str = ACTIVITIES_TABLE
) -> str:
    """Build the insert-or-replace-by-primary-key statement for the registry."""
    names = ", ".join(column_names(columns))
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT OR REPLACE INTO {table} ({names}) VALUES ({placeholders})"


def extract_row(record: Any, columns: Sequence[SchemaColumn] = ACTIVITY_SCHEMA) -> tuple[Any, ...]:
    """Map a remote record to positional values matching ``upsert_sql``."""
    return tuple(col.extract(record) for col in columns)
