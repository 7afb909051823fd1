"""Services package."""

from pantry_ledger.services.storage import (
    BlobStorageInterface,
    InMemoryBlobStorage,
    JsonFileBlobStorage,
    RemoteDocument,
    RemoteStateStorageInterface,
    RemoteStorageError,
    StorageError,
    StoredDocumentError,
    SupabaseStateStorage,
)

__all__ = [
    "BlobStorageInterface",
    "InMemoryBlobStorage",
    "JsonFileBlobStorage",
    "RemoteDocument",
    "RemoteStateStorageInterface",
    "RemoteStorageError",
    "StorageError",
    "StoredDocumentError",
    "SupabaseStateStorage",
]
