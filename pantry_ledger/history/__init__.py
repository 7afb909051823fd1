"""Snapshot history package."""

from pantry_ledger.history.snapshots import VERSION_TAG_PREFIX, SnapshotHistory

__all__ = ["SnapshotHistory", "VERSION_TAG_PREFIX"]
