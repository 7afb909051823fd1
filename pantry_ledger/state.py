"""
Application State

DESIGN DECISION: All process-wide state lives in one explicit AppState
object that components receive by reference. It is the single source of
truth and the single writer to the persistence boundary:

- loaded once at startup (absent blob -> fresh defaults)
- re-serialized wholesale after every mutation
- never written partially

Components (ledger, history, accounts, sync) only touch the slice
selected by ``current_user``.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from pantry_ledger.audit import AuditLogger
from pantry_ledger.config import AppSettings, CloudSettings, StorageSettings, get_settings
from pantry_ledger.errors import NotAuthenticatedError
from pantry_ledger.models.audit import AuditEvent, AuditEventType, AuditSeverity
from pantry_ledger.models.inventory import AppData
from pantry_ledger.models.store import (
    Account,
    CloudConfig,
    GlobalState,
    SystemLogEntry,
    UserStore,
)
from pantry_ledger.services.storage import (
    BlobStorageInterface,
    StorageError,
    StoredDocumentError,
)


logger = structlog.get_logger(__name__)


class AppState:
    """Holds the GlobalState and persists it after every change."""

    def __init__(
        self,
        state: GlobalState,
        storage: BlobStorageInterface,
        state_key: str = "usana_global_v2",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._storage = storage
        self._state_key = state_key
        self._audit_logger = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @staticmethod
    def fresh_state(cloud_settings: Optional[CloudSettings] = None) -> GlobalState:
        """Defaults used when nothing has been persisted yet."""
        cloud_settings = cloud_settings or CloudSettings()
        return GlobalState(
            cloud_config=CloudConfig(
                endpoint=cloud_settings.endpoint,
                credential_key=cloud_settings.api_key,
                is_enabled=cloud_settings.enabled,
            ),
        )

    @classmethod
    def load(
        cls,
        storage: BlobStorageInterface,
        storage_settings: Optional[StorageSettings] = None,
        app_settings: Optional[AppSettings] = None,
        cloud_settings: Optional[CloudSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "AppState":
        """
        Load the persisted state, or start fresh if none exists.

        Raises:
            StoredDocumentError: If a blob exists but cannot be decoded
        """
        if storage_settings is None or app_settings is None:
            settings = get_settings()
            storage_settings = storage_settings or settings.storage
            app_settings = app_settings or settings.app

        audit_logger = audit_logger or AuditLogger()
        raw = storage.read(storage_settings.state_key)
        if raw is None:
            state = cls.fresh_state(cloud_settings)
            logger.info("state_initialized", key=storage_settings.state_key)
        else:
            try:
                state = GlobalState.model_validate_json(raw)
            except ValidationError as e:
                audit_logger.log_error(
                    error_type="StoredDocumentError",
                    error_message=f"{e.error_count()} validation errors",
                    details={"key": storage_settings.state_key},
                )
                raise StoredDocumentError(
                    f"Persisted state under {storage_settings.state_key!r} is unreadable",
                    details=e.errors(include_url=False),
                ) from e
            logger.info(
                "state_loaded",
                key=storage_settings.state_key,
                accounts=len(state.accounts),
            )

        app_state = cls(
            state,
            storage,
            state_key=storage_settings.state_key,
            audit_logger=audit_logger,
        )
        app_state.record_build(app_settings.code_version, app_settings.system_log_limit)
        return app_state

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def global_state(self) -> GlobalState:
        return self._state

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def cloud_config(self) -> CloudConfig:
        return self._state.cloud_config

    @property
    def current_user(self) -> Optional[str]:
        return self._state.current_user

    def require_user(self) -> str:
        """The logged-in username, or NotAuthenticatedError."""
        username = self._state.current_user
        if not username or username not in self._state.user_stores:
            raise NotAuthenticatedError("No account is logged in")
        return username

    def current_account(self) -> Account:
        return self._state.accounts[self.require_user()]

    def active_store(self) -> UserStore:
        return self._state.user_stores[self.require_user()]

    def active_data(self) -> AppData:
        return self.active_store().current

    def replace_store(self, username: str, store: UserStore) -> None:
        """Swap an account's whole UserStore (used by pull)."""
        self._state.user_stores[username] = store

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def serialize(self) -> str:
        return self._state.model_dump_json(by_alias=True)

    def save(self) -> bool:
        """
        Write the whole state to the persistence boundary.

        Fire-and-forget: a failed write is logged and reported through the
        return value, but the in-memory state stays as it is.
        """
        try:
            self._storage.write(self._state_key, self.serialize())
            return True
        except StorageError as e:
            self._audit_logger.log(AuditEvent(
                event_type=AuditEventType.STATE_SAVE_FAILED,
                severity=AuditSeverity.ERROR,
                username=self._state.current_user,
                description="Failed to persist global state",
                error_message=str(e),
                details={"key": self._state_key},
            ))
            return False

    def record_build(self, code_version: str, limit: int = 20) -> bool:
        """
        Record a build the first time it loads this state.

        Returns True if a new entry was added.
        """
        logs = self._state.system_logs
        if logs and logs[0].code_version == code_version:
            return False

        previous = logs[0].code_version if logs else None
        notes = f"upgraded from {previous}" if previous else "first run"
        logs.insert(0, SystemLogEntry(code_version=code_version, notes=notes))
        del logs[limit:]
        self.save()
        return True
