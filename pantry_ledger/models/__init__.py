"""
Data Models Package

All Pydantic models used by the ledger core. Everything persisted or
synced conforms to these schemas.
"""

from pantry_ledger.models.inventory import (
    AppData,
    Currency,
    InboundMethod,
    InventoryItem,
    LedgerModel,
    OutboundPurpose,
    Product,
    Transaction,
    TransactionType,
)
from pantry_ledger.models.store import (
    Account,
    CloudConfig,
    DataVersion,
    GlobalState,
    SystemLogEntry,
    UserStore,
    utc_now,
)
from pantry_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Inventory models
    "AppData",
    "Currency",
    "InboundMethod",
    "InventoryItem",
    "LedgerModel",
    "OutboundPurpose",
    "Product",
    "Transaction",
    "TransactionType",
    # Store models
    "Account",
    "CloudConfig",
    "DataVersion",
    "GlobalState",
    "SystemLogEntry",
    "UserStore",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
