"""Tests for the garmin-cache CLI commands."""

import json
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from garmin_cache import __version__
from garmin_cache.cli import app
from garmin_cache.store.core import ActivityStore

runner = CliRunner()

START = datetime(2024, 4, 20, 6, 30, 0)


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path: Path, db_path: Path) -> None:
    """Point the CLI at a temp database with credentials unset."""
    for name in ("GARMIN_USERNAME", "GARMIN_PASSWORD", "MAX_QUERY_CHARS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GARMIN_CACHE_DB_PATH", str(db_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def seeded(db_path: Path, activity_factory) -> ActivityStore:
    store = ActivityStore(db_path)
    store.ensure_schema()
    store.upsert_batch(
        [
            activity_factory(1, START, activityName="Park Run"),
            activity_factory(2, START + timedelta(days=1), activityName="Swim"),
        ]
    )
    store.close()
    return store


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestSyncCommand:
    def test_missing_credentials(self, db_path: Path):
        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 1
        assert "Missing GARMIN_USERNAME" in result.output
        assert not db_path.exists()

    def test_successful_sync(self, monkeypatch, fake_source, activities_factory):
        monkeypatch.setenv("GARMIN_USERNAME", "runner@example.com")
        monkeypatch.setenv("GARMIN_PASSWORD", "hunter2")
        fake_source.activities = activities_factory(3, start=START)
        source_cls = MagicMock()
        source_cls.from_credentials.return_value = fake_source

        with patch("garmin_cache.sync.service.GarminConnectSource", source_cls):
            result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0
        assert "Successfully synced 3 new activities." in result.output
        assert "Total activities: 3" in result.output

    def test_failed_fetch_reports_database_state(
        self, monkeypatch, fake_source, activities_factory
    ):
        monkeypatch.setenv("GARMIN_USERNAME", "runner@example.com")
        monkeypatch.setenv("GARMIN_PASSWORD", "hunter2")
        fake_source.activities = activities_factory(3, start=START)
        fake_source.fail_at_offset = 0
        source_cls = MagicMock()
        source_cls.from_credentials.return_value = fake_source

        with patch("garmin_cache.sync.service.GarminConnectSource", source_cls):
            result = runner.invoke(app, ["sync"])

        assert result.exit_code == 1
        assert "Error syncing activities" in result.output
        assert "Database is ready" in result.output


class TestQueryCommand:
    def test_text_output(self, seeded):
        result = runner.invoke(
            app, ["query", "SELECT activity_name FROM activities ORDER BY activity_id"]
        )

        assert result.exit_code == 0
        assert "Park Run" in result.output
        assert "Swim" in result.output
        assert "(2 rows)" in result.output

    def test_json_output(self, seeded):
        result = runner.invoke(
            app,
            ["query", "SELECT activity_id FROM activities ORDER BY activity_id", "-f", "json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [{"activity_id": 1}, {"activity_id": 2}]

    def test_empty_result(self, seeded):
        result = runner.invoke(app, ["query", "SELECT * FROM activities WHERE activity_id = 0"])

        assert result.exit_code == 0
        assert "Query returned no results." in result.output

    def test_rejected_query(self, seeded, db_path: Path):
        result = runner.invoke(app, ["query", "DROP TABLE activities"])

        assert result.exit_code == 1
        assert "Error running query" in result.output
        assert ActivityStore(db_path).row_count() == 2

    def test_legacy_max_query_chars(self, seeded, monkeypatch):
        monkeypatch.setenv("MAX_QUERY_CHARS", "10")

        result = runner.invoke(app, ["query", "SELECT * FROM activities"])

        assert result.exit_code == 1
        assert "Query too large" in result.output

    def test_missing_database(self):
        result = runner.invoke(app, ["query", "SELECT 1"])

        assert result.exit_code == 1
        assert "Database file not found" in result.output

    def test_truncated_text_output(self, seeded, monkeypatch):
        monkeypatch.setenv("GARMIN_CACHE_MAX_QUERY_ROWS", "1")

        result = runner.invoke(
            app, ["query", "SELECT activity_name FROM activities ORDER BY activity_id"]
        )

        assert result.exit_code == 0
        assert "Park Run" in result.output
        assert "Swim" not in result.output
        assert "(1 row)" in result.output
        assert "Results truncated to 1 rows" in result.output

    def test_truncated_json_output_warns(self, seeded, monkeypatch):
        monkeypatch.setenv("GARMIN_CACHE_MAX_QUERY_ROWS", "1")

        result = runner.invoke(
            app, ["query", "SELECT activity_id FROM activities", "--format", "json"]
        )

        assert result.exit_code == 0
        assert "Results truncated to 1 rows" in result.output

    def test_unknown_format(self, seeded):
        result = runner.invoke(app, ["query", "SELECT 1", "-f", "yaml"])

        assert result.exit_code == 1
        assert "Unknown format 'yaml'" in result.output


class TestSchemaCommand:
    def test_json_output(self, seeded):
        result = runner.invoke(app, ["schema", "--format", "json"])

        assert result.exit_code == 0
        tables = json.loads(result.stdout)
        assert [t["name"] for t in tables] == ["activities"]

    def test_text_output(self, seeded):
        result = runner.invoke(app, ["schema"])

        assert result.exit_code == 0
        assert "Table: activities" in result.output

    def test_unknown_format(self, seeded):
        result = runner.invoke(app, ["schema", "--format", "csv"])

        assert result.exit_code == 1
        assert "Unknown format 'csv'" in result.output
        assert "activities" not in result.output


class TestMcpCommand:
    def test_starts_server_with_transport(self):
        with patch("garmin_cache.mcp.server.run_mcp_server") as run:
            result = runner.invoke(app, ["mcp", "--transport", "sse"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["transport"] == "sse"

    def test_unknown_transport(self):
        with patch("garmin_cache.mcp.server.run_mcp_server") as run:
            result = runner.invoke(app, ["mcp", "--transport", "carrier-pigeon"])

        assert result.exit_code == 1
        run.assert_not_called()
