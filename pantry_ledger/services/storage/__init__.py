"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the two
storage boundaries: the local state blob and the remote sync table.
"""

from pantry_ledger.services.storage.interface import (
    BlobStorageInterface,
    RemoteDocument,
    RemoteStateStorageInterface,
    RemoteStorageError,
    StorageError,
    StoredDocumentError,
)
from pantry_ledger.services.storage.local import (
    InMemoryBlobStorage,
    JsonFileBlobStorage,
)
from pantry_ledger.services.storage.supabase import SupabaseStateStorage

__all__ = [
    # Interfaces
    "BlobStorageInterface",
    "RemoteDocument",
    "RemoteStateStorageInterface",
    # Exceptions
    "RemoteStorageError",
    "StorageError",
    "StoredDocumentError",
    # Implementations
    "InMemoryBlobStorage",
    "JsonFileBlobStorage",
    "SupabaseStateStorage",
]
