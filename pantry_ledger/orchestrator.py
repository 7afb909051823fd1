"""
Main Orchestrator for Pantry Ledger

This module ties together all the components and defines the session
flows a front end drives:
1. Sign up / sign in (then one automatic, non-fatal pull)
2. Ledger mutations on the signed-in account
3. Snapshot capture / restore
4. Explicit push / pull

DESIGN DECISION: Every component receives the same AppState by
reference. There is one state object per process and one writer at a time.
"""

from typing import Optional, Sequence

import structlog

from pantry_ledger.accounts import AccountDirectory
from pantry_ledger.audit import AuditLogger
from pantry_ledger.catalog import load_catalog
from pantry_ledger.config import Settings, get_settings
from pantry_ledger.history import SnapshotHistory
from pantry_ledger.inventory import LedgerStore
from pantry_ledger.models.inventory import Product
from pantry_ledger.models.store import Account, CloudConfig
from pantry_ledger.services.storage import (
    BlobStorageInterface,
    JsonFileBlobStorage,
)
from pantry_ledger.state import AppState
from pantry_ledger.sync import RemoteFactory, SyncEngine


logger = structlog.get_logger(__name__)


class InventoryApp:
    """
    Session façade over the ledger core.

    Front ends call these methods; they never edit AppState directly.
    """

    def __init__(
        self,
        state: AppState,
        accounts: AccountDirectory,
        ledger: LedgerStore,
        history: SnapshotHistory,
        sync: SyncEngine,
    ):
        self.state = state
        self.accounts = accounts
        self.ledger = ledger
        self.history = history
        self.sync = sync

    async def sign_up(self, username: str, secret: str, display_name: str) -> Account:
        """
        Register and log in, then try one pull.

        A second device registering an existing cloud username picks up
        that username's remote data here.
        """
        account = self.accounts.register(username, secret, display_name)
        await self.sync.auto_pull()
        return account

    async def sign_in(self, username: str, secret: str) -> Account:
        """Log in, then try one pull; pull failures never block the session."""
        account = self.accounts.login(username, secret)
        await self.sync.auto_pull()
        return account

    def sign_out(self) -> None:
        self.accounts.logout()

    def configure_cloud(
        self,
        endpoint: Optional[str] = None,
        credential_key: Optional[str] = None,
        enabled: Optional[bool] = None,
    ) -> CloudConfig:
        """Update the remote endpoint, key or enabled flag."""
        config = self.state.cloud_config
        if endpoint is not None:
            config.endpoint = endpoint.rstrip("/")
        if credential_key is not None:
            config.credential_key = credential_key
        if enabled is not None:
            config.is_enabled = enabled
        self.state.save()
        logger.info("cloud_configured", endpoint=config.endpoint, enabled=config.is_enabled)
        return config


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[BlobStorageInterface] = None,
    catalog: Optional[Sequence[Product]] = None,
    remote_factory: Optional[RemoteFactory] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> InventoryApp:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        storage: Local blob store (defaults to a JSON file under data_dir)
        catalog: Products seeded into new accounts (defaults to settings.catalog_path
                 or the built-in catalog)
        remote_factory: Builds the remote store from CloudConfig (defaults to Supabase)
        audit_logger: Shared audit logger

    Returns:
        A ready InventoryApp with state loaded from storage
    """
    settings = settings or get_settings()
    app_settings = settings.app
    cloud_settings = settings.cloud
    storage_settings = settings.storage

    storage = storage or JsonFileBlobStorage(storage_settings.data_dir)
    audit_logger = audit_logger or AuditLogger()
    if catalog is None:
        catalog = load_catalog(app_settings.catalog_path)

    state = AppState.load(
        storage,
        storage_settings=storage_settings,
        app_settings=app_settings,
        cloud_settings=cloud_settings,
        audit_logger=audit_logger,
    )
    history = SnapshotHistory(state, settings=app_settings)

    return InventoryApp(
        state=state,
        accounts=AccountDirectory(state, catalog=catalog, settings=app_settings),
        ledger=LedgerStore(state, settings=app_settings),
        history=history,
        sync=SyncEngine(
            state,
            history,
            cloud_settings=cloud_settings,
            remote_factory=remote_factory,
        ),
    )
