"""
Shared fixtures.

No real network: the remote table is a dict behind httpx.MockTransport.
"""

import json
from typing import Optional

import httpx
import pytest

from pantry_ledger.accounts import AccountDirectory
from pantry_ledger.config import AppSettings, CloudSettings, StorageSettings
from pantry_ledger.history import SnapshotHistory
from pantry_ledger.inventory import LedgerStore
from pantry_ledger.models.inventory import Currency, Product
from pantry_ledger.models.store import CloudConfig
from pantry_ledger.services.storage import InMemoryBlobStorage, SupabaseStateStorage
from pantry_ledger.state import AppState
from pantry_ledger.sync import SyncEngine


TEST_ENDPOINT = "https://example.supabase.co/rest/v1"
TEST_KEY = "anon-test-key"

TEST_CATALOG = (
    Product(id="P1", name="Fish Oil", category="营养素", default_price=5.0, currency=Currency.AUD),
    Product(id="P2", name="Night Cream", category="护肤", default_price=46.0, currency=Currency.CNY),
    Product(id="P3", name="Calcium", category="骨骼", default_price=12.5, currency=Currency.AUD),
)


class FakeRemoteTable:
    """In-memory stand-in for the remote app_state table."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_status: Optional[int] = None
        self.raise_error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "relation does not exist"})

        if request.method == "GET":
            username = request.url.params["username"].removeprefix("eq.")
            row = self.rows.get(username)
            return httpx.Response(200, json=[row] if row else [])

        if request.method == "POST":
            body = json.loads(request.content)
            self.rows[body["username"]] = body
            return httpx.Response(201)

        return httpx.Response(405)

    def factory(self, config: CloudConfig) -> SupabaseStateStorage:
        return SupabaseStateStorage.from_config(
            config,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        code_version="test-1.0",
        history_limit=10,
        default_exchange_rate=4.6,
        default_threshold=1,
        strict_tags=True,
        system_log_limit=5,
    )


@pytest.fixture
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def state(storage, app_settings) -> AppState:
    return AppState.load(
        storage,
        storage_settings=StorageSettings(state_key="test_state"),
        app_settings=app_settings,
        cloud_settings=CloudSettings(endpoint=TEST_ENDPOINT, api_key="", enabled=False),
    )


@pytest.fixture
def directory(state, app_settings) -> AccountDirectory:
    return AccountDirectory(state, catalog=TEST_CATALOG, settings=app_settings)


@pytest.fixture
def ledger(state, directory, app_settings) -> LedgerStore:
    directory.register("alice", "pw", "Alice's Pantry")
    return LedgerStore(state, settings=app_settings)


@pytest.fixture
def history(state, ledger, app_settings) -> SnapshotHistory:
    return SnapshotHistory(state, settings=app_settings)


@pytest.fixture
def remote_table() -> FakeRemoteTable:
    return FakeRemoteTable()


def enable_cloud(state: AppState) -> None:
    config = state.cloud_config
    config.endpoint = TEST_ENDPOINT
    config.credential_key = TEST_KEY
    config.is_enabled = True


@pytest.fixture
def sync(state, history, remote_table) -> SyncEngine:
    enable_cloud(state)
    return SyncEngine(
        state,
        history,
        cloud_settings=CloudSettings(endpoint=TEST_ENDPOINT, api_key=TEST_KEY),
        remote_factory=remote_table.factory,
    )
