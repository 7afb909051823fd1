"""
Account and Store Models

An Account owns exactly one UserStore: the live AppData, its bounded
snapshot history and the version counter. GlobalState holds every account
and is persisted as a single blob.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, Field

from pantry_ledger.models.inventory import AppData, LedgerModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Account(LedgerModel):
    """
    An authenticated identity.

    The secret is compared as an opaque string.
    """

    username: str = Field(
        ...,
        min_length=1,
        description="Unique login name, also the remote sync key"
    )
    credential_secret: str = Field(
        ...,
        description="Opaque secret, compared verbatim"
    )
    display_name: str = Field(
        default="",
        description="Name shown on the account picker"
    )
    avatar_tag: str = Field(
        default="blue",
        description="Avatar colour tag"
    )
    last_sync: Optional[datetime] = None


class DataVersion(LedgerModel):
    """
    An immutable point-in-time copy of AppData.

    Only SnapshotHistory.capture produces these.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    version_tag: str = Field(
        ...,
        description="Human-readable tag, e.g. v1.0.3"
    )
    timestamp: datetime = Field(default_factory=utc_now)
    description: str = ""
    data: AppData
    code_version: str = Field(
        default="",
        description="Build that captured this snapshot"
    )


class UserStore(LedgerModel):
    """The (AppData, history, versionCounter) triple for one account."""

    current: AppData = Field(default_factory=AppData)
    history: list[DataVersion] = Field(
        default_factory=list,
        description="Snapshots, newest first"
    )
    version_counter: int = Field(
        default=0,
        ge=0,
        description="Total snapshots ever captured; never reused"
    )

    def clone(self) -> "UserStore":
        return self.model_copy(deep=True)


class CloudConfig(LedgerModel):
    """Remote sync settings and bookkeeping."""

    endpoint: str = ""
    credential_key: str = ""
    is_enabled: bool = False
    last_synced_at: Optional[datetime] = None
    last_version_tag: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.is_enabled and self.endpoint and self.credential_key)


class SystemLogEntry(LedgerModel):
    """A record of a code build first loading the persisted state."""

    code_version: str
    recorded_at: datetime = Field(default_factory=utc_now)
    notes: str = ""


class GlobalState(LedgerModel):
    """
    Process-wide state, persisted wholesale after every mutation.

    Keyed by username throughout.
    """

    current_user: Optional[str] = None
    accounts: dict[str, Account] = Field(default_factory=dict)
    user_stores: dict[str, UserStore] = Field(
        default_factory=dict,
        alias="userStore",
    )
    cloud_config: CloudConfig = Field(default_factory=CloudConfig)
    system_logs: list[SystemLogEntry] = Field(
        default_factory=list,
        description="Build records, newest first"
    )
