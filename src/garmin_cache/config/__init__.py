"""Configuration for garmin-cache."""

from garmin_cache.config.settings import (
    CacheSettings,
    GarminCredentials,
    GarminSettings,
    Settings,
    load_settings,
)

__all__ = [
    "CacheSettings",
    "GarminCredentials",
    "GarminSettings",
    "Settings",
    "load_settings",
]
