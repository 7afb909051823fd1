"""
Error kinds raised by the ledger core.

All errors are surfaced synchronously to the caller. Nothing here is
retried automatically; the user re-triggers the action.
"""

from typing import Optional


class PantryLedgerError(Exception):
    """Base exception for the ledger core."""
    pass


class InvalidCredentialError(PantryLedgerError):
    """No account matches the username/secret pair."""
    pass


class AlreadyExistsError(PantryLedgerError):
    """Registration with a username that is already taken."""
    pass


class NotFoundError(PantryLedgerError):
    """Referenced product, snapshot or account does not exist."""
    pass


class InsufficientStockError(PantryLedgerError):
    """Outbound quantity exceeds the stock on hand."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_id}: "
            f"requested {requested}, available {available}"
        )


class InvalidInputError(PantryLedgerError):
    """A mutation argument is out of range or an unknown tag."""
    pass


class NotAuthenticatedError(PantryLedgerError):
    """The operation needs a logged-in account."""
    pass


class SyncError(PantryLedgerError):
    """Base exception for cloud sync."""
    pass


class SyncTransportFailure(SyncError):
    """Network or HTTP-level failure while talking to the remote store."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{detail}")


class SyncNoRemoteData(SyncError):
    """The remote store holds no document for this username yet."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"No remote data for {username!r} yet")


class CloudNotConfiguredError(SyncError):
    """Sync requested without a credential key or with sync disabled."""
    pass
