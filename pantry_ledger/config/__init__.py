"""Configuration package."""

from pantry_ledger.config.settings import (
    AppSettings,
    CloudSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CloudSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
