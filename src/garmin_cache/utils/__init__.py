"""Utility helpers for garmin-cache."""

from garmin_cache.utils.console import (
    get_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "get_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
