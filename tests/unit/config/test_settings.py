"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from garmin_cache.config.settings import (
    CacheSettings,
    GarminCredentials,
    GarminSettings,
    load_settings,
)
from garmin_cache.constants import QUERY_MAX_CHARS, QUERY_MAX_ROWS, SYNC_PAGE_SIZE

ENV_VARS = (
    "GARMIN_USERNAME",
    "GARMIN_PASSWORD",
    "GARMIN_CACHE_DB_PATH",
    "GARMIN_CACHE_PAGE_SIZE",
    "GARMIN_CACHE_MAX_QUERY_CHARS",
    "GARMIN_CACHE_MAX_QUERY_ROWS",
    "GARMIN_CACHE_QUERY_TIMEOUT_SECONDS",
    "MAX_QUERY_CHARS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path) -> None:
    """Isolate every test from the caller's environment and working directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestGarminSettings:
    def test_reads_credentials_from_env(self, monkeypatch):
        monkeypatch.setenv("GARMIN_USERNAME", "runner@example.com")
        monkeypatch.setenv("GARMIN_PASSWORD", "hunter2")

        credentials = GarminSettings().credentials()

        assert credentials == GarminCredentials("runner@example.com", "hunter2")
        assert credentials.missing_fields() == []

    def test_missing_credentials(self):
        credentials = GarminSettings().credentials()

        assert credentials.missing_fields() == ["GARMIN_USERNAME", "GARMIN_PASSWORD"]

    def test_empty_password_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("GARMIN_USERNAME", "runner@example.com")
        monkeypatch.setenv("GARMIN_PASSWORD", "")

        assert GarminSettings().credentials().missing_fields() == ["GARMIN_PASSWORD"]

    def test_password_is_not_exposed(self, monkeypatch):
        monkeypatch.setenv("GARMIN_PASSWORD", "hunter2")

        assert "hunter2" not in repr(GarminSettings())
        assert "hunter2" not in repr(GarminSettings().credentials())


class TestCacheSettings:
    def test_defaults(self, tmp_path: Path):
        settings = CacheSettings()

        assert settings.db_path == (tmp_path / "data" / "garmin-data.db").resolve()
        assert settings.page_size == SYNC_PAGE_SIZE
        assert settings.max_query_chars == QUERY_MAX_CHARS
        assert settings.max_query_rows == QUERY_MAX_ROWS

    def test_db_path_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("GARMIN_CACHE_DB_PATH", str(tmp_path / "elsewhere.db"))

        assert CacheSettings().db_path == (tmp_path / "elsewhere.db").resolve()

    def test_max_query_chars_from_env(self, monkeypatch):
        monkeypatch.setenv("GARMIN_CACHE_MAX_QUERY_CHARS", "1234")
        assert CacheSettings().max_query_chars == 1234

    def test_legacy_max_query_chars_name(self, monkeypatch):
        monkeypatch.setenv("MAX_QUERY_CHARS", "4321")
        assert CacheSettings().max_query_chars == 4321

    def test_invalid_page_size(self, monkeypatch):
        monkeypatch.setenv("GARMIN_CACHE_PAGE_SIZE", "0")

        with pytest.raises(ValidationError):
            CacheSettings()

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("GARMIN_CACHE_QUERY_TIMEOUT_SECONDS", "-1")

        with pytest.raises(ValidationError):
            CacheSettings()


class TestLoadSettings:
    def test_loads_both_groups(self, monkeypatch):
        monkeypatch.setenv("GARMIN_USERNAME", "runner@example.com")
        monkeypatch.setenv("GARMIN_CACHE_MAX_QUERY_ROWS", "25")

        settings = load_settings()

        assert settings.garmin.username == "runner@example.com"
        assert settings.cache.max_query_rows == 25
