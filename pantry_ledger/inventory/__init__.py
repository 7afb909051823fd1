"""Inventory ledger package."""

from pantry_ledger.inventory.ledger import LedgerStore

__all__ = ["LedgerStore"]
