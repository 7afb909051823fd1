"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for both storage boundaries.
This allows us to:
1. Swap the local JSON file for another key/value store
2. Use in-memory storage for testing
3. Point sync at any REST table that speaks the same shape

The interfaces are intentionally small. The core never reads or writes
partially: local state is one blob, the remote holds one document per user.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class BlobStorageInterface(ABC):
    """
    Key/value blob store for the persisted global state.

    Values are opaque strings; the core enforces no schema here.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under key.

        Returns:
            The stored string, or None if the key was never written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the blob stored under key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove the blob stored under key.

        Returns:
            True if something was removed
        """
        pass


class RemoteDocument(BaseModel):
    """One row of the remote sync table."""

    username: str
    state: dict[str, Any]
    updated_at: Optional[datetime] = None


class RemoteStateStorageInterface(ABC):
    """
    Remote store holding one whole-UserStore document per username.

    Writes are upserts: the document for a username is always fully
    replaced, never field-merged.
    """

    @abstractmethod
    async def fetch_state(self, username: str) -> Optional[RemoteDocument]:
        """
        Fetch the document for username.

        Returns:
            The document if one exists, None otherwise

        Raises:
            RemoteStorageError: On transport failure or non-success response
        """
        pass

    @abstractmethod
    async def upsert_state(self, username: str, state: dict[str, Any]) -> None:
        """
        Create or replace the document for username.

        Raises:
            RemoteStorageError: On transport failure or non-success response
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RemoteStorageError(StorageError):
    """The remote store answered with a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StoredDocumentError(StorageError):
    """A stored document could not be decoded."""

    def __init__(self, message: str, details: Optional[list] = None):
        self.details = details or []
        super().__init__(message)

