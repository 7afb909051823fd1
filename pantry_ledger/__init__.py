"""
Pantry Ledger - Source Package

The data core of a household inventory tracker: one ledger of stock and
movements per account, versioned snapshots of that ledger, and whole-document
sync with a remote table for multi-device use.

DESIGN PRINCIPLES:
1. Stock never goes negative
2. Transactions are append-only
3. Snapshots never alias live data
4. Every mutation is persisted and audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pantry Ledger Team"
