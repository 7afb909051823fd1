"""
Snapshot History

Captures and restores point-in-time copies of an account's AppData.

INVARIANTS:
- version_counter strictly increases and is never reused, even after
  old snapshots are evicted
- history is newest first and never longer than the configured limit
- snapshots share no references with live data, in either direction
"""

from typing import Optional
from uuid import uuid4

from pantry_ledger.audit import AuditLogger
from pantry_ledger.config import AppSettings, get_settings
from pantry_ledger.errors import NotFoundError
from pantry_ledger.models.audit import AuditEventBuilder
from pantry_ledger.models.inventory import AppData
from pantry_ledger.models.store import DataVersion
from pantry_ledger.state import AppState


VERSION_TAG_PREFIX = "v1.0."


class SnapshotHistory:
    """Version history for the logged-in account."""

    def __init__(
        self,
        state: AppState,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger or state.audit_logger

    @property
    def limit(self) -> int:
        return self._settings.history_limit

    @property
    def version_counter(self) -> int:
        return self._state.active_store().version_counter

    def versions(self) -> list[DataVersion]:
        """Snapshots, newest first."""
        return list(self._state.active_store().history)

    def latest(self) -> Optional[DataVersion]:
        history = self._state.active_store().history
        return history[0] if history else None

    def get(self, version_id: str) -> DataVersion:
        for version in self._state.active_store().history:
            if version.id == version_id:
                return version
        raise NotFoundError(f"Unknown snapshot: {version_id}")

    def capture(self, description: str = "", code_version: Optional[str] = None) -> DataVersion:
        """
        Deep-copy the live AppData into a new snapshot.

        The oldest snapshot is dropped once the history exceeds its limit.
        """
        store = self._state.active_store()
        next_counter = store.version_counter + 1

        version = DataVersion(
            id=str(uuid4()),
            version_tag=f"{VERSION_TAG_PREFIX}{next_counter}",
            description=description,
            data=store.current.clone(),
            code_version=code_version or self._settings.code_version,
        )

        store.version_counter = next_counter
        store.history.insert(0, version)
        del store.history[self.limit:]

        self._audit_logger.log(AuditEventBuilder.snapshot_captured(
            username=self._state.require_user(),
            version_id=version.id,
            version_tag=version.version_tag,
            description=description,
        ))
        self._state.save()
        return version

    def restore(self, version: DataVersion) -> AppData:
        """
        Replace the live AppData with a copy of the snapshot's data.

        Destructive: live changes made since the snapshot are lost. No
        schema migration is attempted; a snapshot from another build is
        restored as-is and the mismatch is logged.
        """
        store = self._state.active_store()
        store.current = version.data.clone()

        self._audit_logger.log(AuditEventBuilder.snapshot_restored(
            username=self._state.require_user(),
            version_id=version.id,
            version_tag=version.version_tag,
            code_version=version.code_version,
            running_version=self._settings.code_version,
        ))
        self._state.save()
        return store.current
