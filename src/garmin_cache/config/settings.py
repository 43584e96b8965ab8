"""Runtime configuration settings for garmin-cache.

This module uses Pydantic Settings for configuration that can be
overridden via environment variables. This provides:
- Type validation
- Environment variable support (GARMIN_ and GARMIN_CACHE_ prefixes)
- Default values
- Easy testing via dependency injection

Settings are read once at process start (see ``load_settings``) and passed
into the core as explicit objects; the core never reads the environment.
"""

from dataclasses import dataclass
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from garmin_cache.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_DB_FILENAME,
    ENV_GARMIN_PASSWORD,
    ENV_GARMIN_USERNAME,
    QUERY_MAX_CHARS,
    QUERY_MAX_ROWS,
    QUERY_TIMEOUT_SECONDS,
    SYNC_PAGE_SIZE,
)


@dataclass(frozen=True)
class GarminCredentials:
    """Credentials for the remote activity provider.

    Either field may be None; the sync engine checks for presence before
    any network call.
    """

    username: str | None = None
    password: str | None = None

    def missing_fields(self) -> list[str]:
        """Return the environment names of the credentials that are not set."""
        missing = []
        if not self.username:
            missing.append(ENV_GARMIN_USERNAME)
        if not self.password:
            missing.append(ENV_GARMIN_PASSWORD)
        return missing

    def __repr__(self) -> str:
        password = "'**********'" if self.password else None
        return f"GarminCredentials(username={self.username!r}, password={password})"


class GarminSettings(BaseSettings):
    """Garmin Connect account settings.

    Can be overridden via environment variables with GARMIN_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="GARMIN_")

    username: str | None = Field(
        default=None,
        description="Garmin Connect account email",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Garmin Connect account password",
    )

    def credentials(self) -> GarminCredentials:
        """Build the explicit credentials struct handed to the sync engine."""
        return GarminCredentials(
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
        )


class CacheSettings(BaseSettings):
    """Local cache and query gateway settings.

    Can be overridden via environment variables with GARMIN_CACHE_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="GARMIN_CACHE_", populate_by_name=True)

    db_path: Path = Field(
        default=Path(DEFAULT_DATA_DIR) / DEFAULT_DB_FILENAME,
        description="SQLite database file. Relative paths resolve against the working directory",
    )
    page_size: int = Field(
        default=SYNC_PAGE_SIZE,
        description="Number of activities requested per page during sync",
        ge=1,
        le=1000,
    )
    max_query_chars: int = Field(
        default=QUERY_MAX_CHARS,
        description="Maximum query length accepted by the query gateway",
        ge=1,
        validation_alias=AliasChoices("GARMIN_CACHE_MAX_QUERY_CHARS", "MAX_QUERY_CHARS"),
    )
    max_query_rows: int = Field(
        default=QUERY_MAX_ROWS,
        description="Maximum number of rows returned by a single query",
        ge=1,
    )
    query_timeout_seconds: float = Field(
        default=QUERY_TIMEOUT_SECONDS,
        description="Wall-clock budget for a single query before it is interrupted",
        gt=0,
    )

    @field_validator("db_path")
    @classmethod
    def _resolve_db_path(cls, value: Path) -> Path:
        return value.expanduser().resolve()


@dataclass(frozen=True)
class Settings:
    """All settings, loaded together at process start."""

    garmin: GarminSettings
    cache: CacheSettings


def load_settings() -> Settings:
    """Load settings from the environment (and any already-loaded .env file)."""
    return Settings(garmin=GarminSettings(), cache=CacheSettings())
