"""
Sync Engine

Reconciles the logged-in account's UserStore with the remote table by
whole-document push and pull.

DESIGN DECISION: Last writer wins. There is no merge, no version guard and
no locking:
- push replaces the remote document for the username outright
- pull replaces the local UserStore outright
- a device that pulls loses any local edits it never pushed

KNOWN RISK: two devices editing the same account concurrently will
silently overwrite each other. Acceptable for one household; a stricter
design would compare version counters before replacing either side.

The store is serialized before the first await, so a push always sends a
consistent point-in-time copy even if the ledger changes while the request
is in flight. Failed requests are never retried.
"""

from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from pantry_ledger.audit import AuditLogger
from pantry_ledger.config import CloudSettings, get_settings
from pantry_ledger.errors import (
    CloudNotConfiguredError,
    SyncError,
    SyncNoRemoteData,
    SyncTransportFailure,
)
from pantry_ledger.history import SnapshotHistory
from pantry_ledger.models.audit import AuditEventBuilder, AuditEventType
from pantry_ledger.models.store import CloudConfig, DataVersion, UserStore, utc_now
from pantry_ledger.services.storage import (
    RemoteStateStorageInterface,
    StorageError,
    SupabaseStateStorage,
)
from pantry_ledger.state import AppState


logger = structlog.get_logger(__name__)

RemoteFactory = Callable[[CloudConfig], RemoteStateStorageInterface]


class SyncEngine:
    """Push/pull of whole UserStore documents keyed by username."""

    def __init__(
        self,
        state: AppState,
        history: SnapshotHistory,
        cloud_settings: Optional[CloudSettings] = None,
        remote_factory: Optional[RemoteFactory] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._history = history
        self._cloud_settings = cloud_settings or get_settings().cloud
        self._remote_factory = remote_factory or self._default_remote
        self._audit_logger = audit_logger or state.audit_logger

    def _default_remote(self, config: CloudConfig) -> RemoteStateStorageInterface:
        return SupabaseStateStorage.from_config(
            config,
            table_name=self._cloud_settings.table_name,
            timeout_seconds=self._cloud_settings.timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return self._state.cloud_config.is_configured

    def _open_remote(self) -> RemoteStateStorageInterface:
        config = self._state.cloud_config
        if not config.credential_key:
            raise CloudNotConfiguredError("No cloud credential key configured")
        if not config.is_enabled:
            raise CloudNotConfiguredError("Cloud sync is disabled")
        if not config.endpoint:
            raise CloudNotConfiguredError("No cloud endpoint configured")
        return self._remote_factory(config)

    def _transport_failure(
        self,
        username: str,
        operation: str,
        error: StorageError,
    ) -> SyncTransportFailure:
        status_code = getattr(error, "status_code", None)
        self._audit_logger.log_sync_failed(
            username=username,
            operation=operation,
            error_message=str(error),
            status_code=status_code,
        )
        return SyncTransportFailure(str(error), status_code=status_code)

    async def push(self, description: str = "Cloud sync") -> DataVersion:
        """
        Capture a snapshot, then upload the whole UserStore.

        On failure the local snapshot is kept and nothing else changes.

        Raises:
            CloudNotConfiguredError: If sync is not configured
            SyncTransportFailure: On network or HTTP failure
        """
        username = self._state.require_user()
        remote = self._open_remote()

        version = self._history.capture(description)
        payload = self._state.active_store().to_document()

        try:
            await remote.upsert_state(username, payload)
        except StorageError as e:
            raise self._transport_failure(username, "push", e) from e
        finally:
            await remote.close()

        synced_at = utc_now()
        config = self._state.cloud_config
        config.last_synced_at = synced_at
        config.last_version_tag = version.version_tag
        account = self._state.global_state.accounts.get(username)
        if account is not None:
            account.last_sync = synced_at

        self._audit_logger.log(AuditEventBuilder.sync_completed(
            username=username,
            event_type=AuditEventType.SYNC_PUSHED,
            version_tag=version.version_tag,
            history_size=len(payload.get("history", [])),
        ))
        self._state.save()
        return version

    async def pull(self, explicit: bool = True) -> Optional[UserStore]:
        """
        Replace the local UserStore with the remote document.

        Returns:
            The new local store, or None if the remote has nothing and
            the pull was not explicit

        Raises:
            CloudNotConfiguredError: If sync is not configured
            SyncNoRemoteData: If nothing is stored remotely and explicit is True
            SyncTransportFailure: On network/HTTP failure or a malformed document
        """
        username = self._state.require_user()
        remote = self._open_remote()

        try:
            document = await remote.fetch_state(username)
        except StorageError as e:
            raise self._transport_failure(username, "pull", e) from e
        finally:
            await remote.close()

        if document is None:
            self._audit_logger.log(AuditEventBuilder.sync_no_remote_data(username))
            if explicit:
                raise SyncNoRemoteData(username)
            return None

        try:
            store = UserStore.model_validate(document.state)
        except ValidationError as e:
            self._audit_logger.log_sync_failed(
                username=username,
                operation="pull",
                error_message=f"malformed remote document: {e.error_count()} errors",
            )
            raise SyncTransportFailure("Remote document is malformed") from e

        self._state.replace_store(username, store)

        latest = store.history[0].version_tag if store.history else None
        self._audit_logger.log(AuditEventBuilder.sync_completed(
            username=username,
            event_type=AuditEventType.SYNC_PULLED,
            version_tag=latest,
            history_size=len(store.history),
        ))
        self._state.save()
        return store

    async def auto_pull(self) -> Optional[UserStore]:
        """
        Post-login pull. Never raises: failures are logged and the
        session carries on with local data.
        """
        if not self.is_configured:
            return None
        try:
            return await self.pull(explicit=False)
        except SyncError as e:
            logger.warning(
                "auto_pull_failed",
                username=self._state.current_user,
                error=str(e),
            )
            return None
