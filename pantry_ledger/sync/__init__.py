"""Cloud sync package."""

from pantry_ledger.sync.engine import RemoteFactory, SyncEngine

__all__ = ["RemoteFactory", "SyncEngine"]
