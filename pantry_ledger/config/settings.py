"""
Configuration Management for Pantry Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable of the ledger core (history depth, default exchange rate,
storage location, remote endpoint) is declared and validated in one place.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CLOUD_ENDPOINT = "https://mvjmkyjnqffphqehtuhk.supabase.co/rest/v1"


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".pantry",
        description="Directory holding the persisted state blob"
    )
    state_key: str = Field(
        default="usana_global_v2",
        min_length=1,
        description="Key under which the whole global state is stored"
    )


class CloudSettings(BaseSettings):
    """Remote sync table configuration (Supabase REST)."""

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_CLOUD_",
        extra="ignore"
    )

    endpoint: str = Field(
        default=DEFAULT_CLOUD_ENDPOINT,
        description="REST base URL; the table is addressed as {endpoint}/{table_name}"
    )
    api_key: str = Field(
        default="",
        description="Bearer credential sent as apikey/Authorization headers"
    )
    table_name: str = Field(
        default="app_state",
        description="Remote table keyed by username"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Transport timeout for a single sync request"
    )
    enabled: bool = Field(
        default=False,
        description="Whether sync starts enabled for a fresh state"
    )

    @field_validator('endpoint')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    code_version: str = Field(
        default="1.0.0",
        description="Build identifier recorded on every snapshot"
    )
    history_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of snapshots kept per account"
    )
    default_exchange_rate: float = Field(
        default=4.6,
        gt=0,
        description="CNY per AUD for a freshly registered account"
    )
    default_threshold: int = Field(
        default=1,
        ge=0,
        description="Low-stock alert line seeded for every catalog product"
    )
    strict_tags: bool = Field(
        default=True,
        description="Reject inbound/outbound tags outside the known enumerations"
    )
    system_log_limit: int = Field(
        default=20,
        ge=1,
        description="Number of build records kept in the global state"
    )
    catalog_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file replacing the built-in catalog"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def cloud(self) -> CloudSettings:
        return CloudSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    ``<name>_error`` entry for each group that failed to load.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "cloud", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
