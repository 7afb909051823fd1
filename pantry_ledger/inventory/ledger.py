"""
Ledger Store

DESIGN DECISION: These methods are the only legal way to change an
account's AppData. Every call validates all of its arguments before
touching anything, so a rejected call leaves inventory and transactions
exactly as they were.

GUARANTEES after every successful call:
- stock_quantity >= 0 for every item
- the transaction log only grows (restore and account deletion aside)
- the full state has been handed to the persistence boundary
"""

import math
import time
from datetime import date
from typing import Optional, Union

from pantry_ledger.audit import AuditLogger
from pantry_ledger.config import AppSettings, get_settings
from pantry_ledger.errors import (
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
)
from pantry_ledger.models.audit import AuditEventBuilder, AuditEventType
from pantry_ledger.models.inventory import (
    AppData,
    Currency,
    InboundMethod,
    InventoryItem,
    OutboundPurpose,
    Transaction,
    TransactionType,
)
from pantry_ledger.state import AppState


DateLike = Union[date, str, None]


class LedgerStore:
    """
    Applies inbound/outbound movements to the logged-in account's ledger.
    """

    def __init__(
        self,
        state: AppState,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger or state.audit_logger

    @property
    def data(self) -> AppData:
        """The live AppData of the logged-in account."""
        return self._state.active_data()

    # -------------------------------------------------------------------------
    # Argument checks
    # -------------------------------------------------------------------------

    def _require_item(self, product_id: str) -> InventoryItem:
        item = self.data.inventory.get(product_id)
        if item is None:
            raise NotFoundError(f"Unknown product: {product_id}")
        return item

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInputError(f"Quantity must be a positive integer, got {quantity!r}")

    def _check_tag(self, tag: str, allowed: type) -> str:
        """Validate an inbound method / outbound purpose tag."""
        if isinstance(tag, allowed):
            return tag.value
        if self._settings.strict_tags:
            try:
                return allowed(tag).value
            except ValueError:
                known = ", ".join(member.value for member in allowed)
                raise InvalidInputError(f"Unknown tag {tag!r}; expected one of: {known}")
        if not isinstance(tag, str) or not tag.strip():
            raise InvalidInputError("Tag must be a non-empty string")
        return tag

    @staticmethod
    def _check_amount(value, name: str, allow_zero: bool = True) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidInputError(f"{name} must be a finite number, got {value!r}")
        if value < 0 or (value == 0 and not allow_zero):
            bound = ">= 0" if allow_zero else "> 0"
            raise InvalidInputError(f"{name} must be {bound}, got {value!r}")
        return float(value)

    @staticmethod
    def _coerce_date(on: DateLike) -> date:
        if on is None:
            return date.today()
        if isinstance(on, date):
            return on
        try:
            return date.fromisoformat(on)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid date: {on!r}")

    def _next_transaction_id(self) -> str:
        """
        Millisecond timestamp, bumped past the newest existing id so ids
        stay unique and non-decreasing even within one millisecond.
        """
        candidate = time.time_ns() // 1_000_000
        transactions = self.data.transactions
        if transactions and transactions[0].id.isdigit():
            candidate = max(candidate, int(transactions[0].id) + 1)
        return str(candidate)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def record_inbound(
        self,
        product_id: str,
        quantity: int,
        unit_price: float,
        method: Union[InboundMethod, str],
        on: DateLike = None,
    ) -> Transaction:
        """
        Record stock arriving.

        The unit price overwrites the item's current price (last inbound
        price wins, no averaging).

        Raises:
            NotFoundError: If product_id is not in the inventory
            InvalidInputError: If quantity, price, method or date is invalid
        """
        item = self._require_item(product_id)
        self._check_quantity(quantity)
        unit_price = self._check_amount(unit_price, "Unit price")
        detail = self._check_tag(method, InboundMethod)
        transaction_date = self._coerce_date(on)

        transaction = Transaction(
            id=self._next_transaction_id(),
            product_id=product_id,
            product_name=item.name,
            transaction_date=transaction_date,
            quantity=quantity,
            price=unit_price,
            currency=item.currency,
            type=TransactionType.INBOUND,
            detail=detail,
        )

        item.current_price = unit_price
        item.stock_quantity += quantity
        self.data.transactions.insert(0, transaction)

        self._commit(AuditEventBuilder.movement_recorded(
            username=self._state.require_user(),
            event_type=AuditEventType.INBOUND_RECORDED,
            product_id=product_id,
            quantity=quantity,
            stock_after=item.stock_quantity,
            detail=detail,
            transaction_id=transaction.id,
        ))
        return transaction

    def record_outbound(
        self,
        product_id: str,
        quantity: int,
        purpose: Union[OutboundPurpose, str],
        note: Optional[str] = None,
        on: DateLike = None,
    ) -> Transaction:
        """
        Record stock leaving, priced at the item's current price.

        Raises:
            NotFoundError: If product_id is not in the inventory
            InsufficientStockError: If quantity exceeds stock on hand
            InvalidInputError: If quantity, purpose or date is invalid
        """
        item = self._require_item(product_id)
        self._check_quantity(quantity)
        detail = self._check_tag(purpose, OutboundPurpose)
        transaction_date = self._coerce_date(on)

        if item.stock_quantity < quantity:
            self._audit_logger.log(AuditEventBuilder.outbound_rejected(
                username=self._state.require_user(),
                product_id=product_id,
                requested=quantity,
                available=item.stock_quantity,
            ))
            raise InsufficientStockError(product_id, quantity, item.stock_quantity)

        transaction = Transaction(
            id=self._next_transaction_id(),
            product_id=product_id,
            product_name=item.name,
            transaction_date=transaction_date,
            quantity=quantity,
            price=item.current_price,
            currency=item.currency,
            type=TransactionType.OUTBOUND,
            detail=detail,
            note=note or None,
        )

        item.stock_quantity -= quantity
        self.data.transactions.insert(0, transaction)

        self._commit(AuditEventBuilder.movement_recorded(
            username=self._state.require_user(),
            event_type=AuditEventType.OUTBOUND_RECORDED,
            product_id=product_id,
            quantity=quantity,
            stock_after=item.stock_quantity,
            detail=detail,
            transaction_id=transaction.id,
        ))
        return transaction

    def set_threshold(self, product_id: str, value: int) -> InventoryItem:
        """Set the low-stock alert line for one item."""
        item = self._require_item(product_id)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidInputError(f"Threshold must be a non-negative integer, got {value!r}")

        previous = item.threshold
        item.threshold = value
        self._commit(AuditEventBuilder.product_updated(
            username=self._state.require_user(),
            event_type=AuditEventType.THRESHOLD_UPDATED,
            product_id=product_id,
            details={"previous": previous, "threshold": value},
        ))
        return item

    def remove_product(self, product_id: str) -> InventoryItem:
        """
        Delete an inventory entry.

        Transactions referencing it are kept unchanged (orphaned).
        """
        self._require_item(product_id)
        removed = self.data.inventory.pop(product_id)
        orphaned = sum(1 for t in self.data.transactions if t.product_id == product_id)

        self._commit(AuditEventBuilder.product_updated(
            username=self._state.require_user(),
            event_type=AuditEventType.PRODUCT_REMOVED,
            product_id=product_id,
            details={"stock_dropped": removed.stock_quantity, "orphaned_transactions": orphaned},
        ))
        return removed

    def set_exchange_rate(self, value: float) -> None:
        """Set the CNY-per-AUD display rate. Transactions keep their currency."""
        value = self._check_amount(value, "Exchange rate", allow_zero=False)

        previous = self.data.exchange_rate
        self.data.exchange_rate = value
        self._commit(AuditEventBuilder.product_updated(
            username=self._state.require_user(),
            event_type=AuditEventType.EXCHANGE_RATE_UPDATED,
            product_id=None,
            details={"previous": previous, "exchange_rate": value},
        ))

    def _commit(self, event) -> None:
        self._audit_logger.log(event)
        self._state.save()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def items(self) -> list[InventoryItem]:
        """Inventory sorted by product id."""
        return sorted(self.data.inventory.values(), key=lambda item: item.id)

    def search(self, term: str) -> list[InventoryItem]:
        """Items whose name or id contains term, case-insensitively."""
        needle = term.strip().lower()
        return [
            item for item in self.items()
            if needle in item.name.lower() or needle in item.id.lower()
        ]

    def low_stock(self) -> list[InventoryItem]:
        """Items at or below their alert line."""
        return [item for item in self.items() if item.is_low_stock]

    def transactions_for(self, product_id: str) -> list[Transaction]:
        """Movements for one product, newest first, orphans included."""
        return [t for t in self.data.transactions if t.product_id == product_id]

    def price_in_aud(self, item: InventoryItem) -> float:
        if item.currency == Currency.AUD:
            return item.current_price
        return item.current_price / self.data.exchange_rate

    def total_value_aud(self) -> float:
        """Stock on hand valued at current prices, in AUD."""
        return sum(
            self.price_in_aud(item) * item.stock_quantity
            for item in self.data.inventory.values()
        )
