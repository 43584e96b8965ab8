"""Tests for the activity schema registry."""

from types import SimpleNamespace

from garmin_cache.constants import ACTIVITIES_TABLE, WATERMARK_COLUMN
from garmin_cache.store.schema import (
    ACTIVITY_SCHEMA,
    SchemaColumn,
    column_names,
    create_table_sql,
    extract_row,
    upsert_sql,
)


class TestSchemaColumn:
    """Tests for single-column extraction."""

    def test_extracts_top_level_field(self):
        col = SchemaColumn("distance", "REAL", "distance")
        assert col.extract({"distance": 5012.3}) == 5012.3

    def test_extracts_nested_field(self):
        col = SchemaColumn("activity_type_key", "TEXT", "activityType.typeKey")
        record = {"activityType": {"typeKey": "trail_running"}}
        assert col.extract(record) == "trail_running"

    def test_missing_segment_yields_none(self):
        col = SchemaColumn("activity_type_key", "TEXT", "activityType.typeKey")
        assert col.extract({}) is None
        assert col.extract({"activityType": None}) is None
        assert col.extract({"activityType": {}}) is None

    def test_extracts_from_attribute_objects(self):
        col = SchemaColumn("activity_type_key", "TEXT", "activityType.typeKey")
        record = SimpleNamespace(activityType=SimpleNamespace(typeKey="cycling"))
        assert col.extract(record) == "cycling"

    def test_definition(self):
        col = SchemaColumn("activity_id", "INTEGER PRIMARY KEY", "activityId")
        assert col.definition == "activity_id INTEGER PRIMARY KEY"


class TestActivitySchema:
    """Tests for the registry and the SQL derived from it."""

    def test_primary_key_is_activity_id(self):
        assert ACTIVITY_SCHEMA[0].name == "activity_id"
        assert "PRIMARY KEY" in ACTIVITY_SCHEMA[0].sql_type

    def test_column_names_are_unique(self):
        names = column_names()
        assert len(names) == len(set(names))

    def test_watermark_column_is_registered(self):
        assert WATERMARK_COLUMN in column_names()

    def test_create_table_sql_lists_every_column(self):
        sql = create_table_sql()
        assert sql.startswith(f"CREATE TABLE IF NOT EXISTS {ACTIVITIES_TABLE} (")
        for col in ACTIVITY_SCHEMA:
            assert col.definition in sql

    def test_upsert_sql_has_one_placeholder_per_column(self):
        sql = upsert_sql()
        assert sql.startswith(f"INSERT OR REPLACE INTO {ACTIVITIES_TABLE} (")
        assert sql.count("?") == len(ACTIVITY_SCHEMA)

    def test_appending_a_column_changes_both_statements(self):
        extended = (*ACTIVITY_SCHEMA, SchemaColumn("body_battery", "INTEGER", "bodyBattery"))
        assert "body_battery INTEGER" in create_table_sql(extended)
        assert upsert_sql(extended).count("?") == len(ACTIVITY_SCHEMA) + 1
        assert extract_row({"bodyBattery": 42}, extended)[-1] == 42

    def test_extract_row_matches_column_order(self, activity_factory):
        record = activity_factory(7, None, activityName="Lunch Ride")
        row = extract_row(record)

        assert len(row) == len(ACTIVITY_SCHEMA)
        names = column_names()
        assert row[names.index("activity_id")] == 7
        assert row[names.index("activity_name")] == "Lunch Ride"
        assert row[names.index("activity_type_key")] == "running"
        # Fields absent from the record map to NULL
        assert row[names.index("lap_count")] is None
