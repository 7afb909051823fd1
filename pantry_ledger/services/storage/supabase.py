"""
Supabase REST Remote Storage

DESIGN DECISION: The remote store is a single PostgREST table
(``app_state``) with one row per username:

    username    text primary key
    state       jsonb        -- the whole UserStore document
    updated_at  timestamptz

Reads filter by username; writes are upserts with ``on_conflict=username``
so the row is always replaced in full.

TRADEOFFS:
- No conflict detection: whoever pushes last wins
- The table must already exist; a missing table surfaces as an HTTP error
- No retries here; a failed request is reported once to the caller
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from pantry_ledger.models.store import CloudConfig
from pantry_ledger.services.storage.interface import (
    RemoteDocument,
    RemoteStateStorageInterface,
    RemoteStorageError,
)


logger = structlog.get_logger(__name__)


class SupabaseStateStorage(RemoteStateStorageInterface):
    """
    httpx client for the remote ``app_state`` table.

    A fresh AsyncClient is opened per request; sync happens a few times
    per session at most.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        table_name: str = "app_state",
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = f"{endpoint.rstrip('/')}/{table_name}"
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: CloudConfig,
        table_name: str = "app_state",
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SupabaseStateStorage":
        return cls(
            endpoint=config.endpoint,
            api_key=config.credential_key,
            table_name=table_name,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str) -> None:
        if response.is_success:
            return
        body = response.text[:300]
        raise RemoteStorageError(
            f"{operation} failed: {body or response.reason_phrase}",
            status_code=response.status_code,
        )

    async def fetch_state(self, username: str) -> Optional[RemoteDocument]:
        """Fetch the row for username, or None when the table has none."""
        try:
            async with self._client() as client:
                response = await client.get(
                    self._url,
                    params={"username": f"eq.{username}", "select": "*"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteStorageError(f"fetch failed: {e}") from e

        self._raise_for_status(response, "fetch")

        try:
            rows = response.json()
        except ValueError as e:
            raise RemoteStorageError(
                f"fetch returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

        if not rows:
            return None

        row = rows[0] if isinstance(rows, list) else rows

        try:
            if isinstance(row.get("state"), str):
                # text columns hold the document as a JSON string
                row = {**row, "state": json.loads(row["state"])}
            return RemoteDocument.model_validate(row)
        except (ValueError, ValidationError) as e:
            raise RemoteStorageError(
                f"fetch returned an unexpected row: {e}",
                status_code=response.status_code,
            ) from e

    async def upsert_state(self, username: str, state: dict[str, Any]) -> None:
        """Create or fully replace the row for username."""
        body = {
            "username": username,
            "state": state,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    self._url,
                    params={"on_conflict": "username"},
                    headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                    json=body,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteStorageError(f"upsert failed: {e}") from e

        self._raise_for_status(response, "upsert")
        logger.debug("remote_state_upserted", username=username, status=response.status_code)
