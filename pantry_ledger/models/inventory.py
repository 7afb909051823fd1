"""
Core Inventory Models for Pantry Ledger

These models define the strict schemas for the per-account ledger:
catalog products, stocked items, movement records and the AppData
container that groups them.

DESIGN DECISION: Attributes are snake_case in Python but serialize under
camelCase aliases. The persisted blob and the remote sync document keep the
field names other clients of the same table already read and write.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


class LedgerModel(BaseModel):
    """Base model: camelCase on the wire, tolerant of unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Serialize to a JSON-ready dict using wire names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Currencies a product can be priced in."""
    AUD = "AUD"
    CNY = "CNY"


class TransactionType(str, Enum):
    """Direction of an inventory movement."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class InboundMethod(str, Enum):
    """How stock arrived."""
    AUTO_ORDER = "自动订货"
    SINGLE_ORDER = "单次订货"
    PURCHASE = "采购"
    GIFT = "赠品"
    OTHER = "其他"


class OutboundPurpose(str, Enum):
    """Why stock left."""
    SELF = "自用"
    KIDS = "孩子用"
    LOANED = "借出"
    SOLD = "售出"
    OTHER = "其他"


# =============================================================================
# PRODUCTS AND STOCK
# =============================================================================

class ProductFields(LedgerModel):
    """Fields shared by catalog products and stocked items."""

    id: str = Field(
        ...,
        min_length=1,
        description="Catalog product identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )
    category: str = Field(
        default="",
        description="Catalog grouping"
    )
    default_price: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="List price from the catalog"
    )
    currency: Currency = Field(
        default=Currency.AUD,
        description="Currency the product is priced in"
    )


class Product(ProductFields):
    """An immutable catalog entry."""

    model_config = ConfigDict(frozen=True)


class InventoryItem(ProductFields):
    """
    A catalog product as stocked by one account.

    Stock non-negativity is enforced by the ledger at the outbound
    boundary, not by this model.
    """

    current_price: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Last inbound unit price"
    )
    stock_quantity: int = Field(
        default=0,
        description="Units on hand"
    )
    threshold: int = Field(
        default=1,
        ge=0,
        description="Low-stock alert line"
    )

    @classmethod
    def from_product(cls, product: Product, threshold: int = 1) -> "InventoryItem":
        """Seed a zero-stock item from a catalog product."""
        return cls(
            **product.model_dump(),
            current_price=product.default_price,
            stock_quantity=0,
            threshold=threshold,
        )

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.threshold


class Transaction(LedgerModel):
    """
    One inventory movement.

    CRITICAL: Transactions are append-only. They are never edited, and
    they survive removal of the product they reference.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="Unique, time-derived identifier"
    )
    product_id: str
    product_name: str = Field(
        ...,
        description="Product name at the time of the movement"
    )
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date of the movement"
    )
    quantity: int = Field(
        ...,
        gt=0
    )
    price: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Unit price in the product's currency"
    )
    currency: Currency
    type: TransactionType
    detail: str = Field(
        default="",
        description="Inbound method or outbound purpose tag"
    )
    note: Optional[str] = None


class AppData(LedgerModel):
    """
    The live ledger of one account.

    Transactions are ordered newest first.
    """

    inventory: dict[str, InventoryItem] = Field(default_factory=dict)
    transactions: list[Transaction] = Field(default_factory=list)
    exchange_rate: float = Field(
        default=4.6,
        gt=0,
        allow_inf_nan=False,
        description="CNY per AUD, display conversion only"
    )

    def clone(self) -> "AppData":
        """Deep copy with no shared references to this instance."""
        return self.model_copy(deep=True)
