"""
Product catalog.

The catalog is read-only. It is consumed once per account, at
registration, to seed a zero-stock inventory entry for every product.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from pantry_ledger.models.inventory import Currency, Product


DEFAULT_CATALOG: tuple[Product, ...] = (
    Product(id="101", name="HealthPak 100", category="营养素", default_price=189.0, currency=Currency.AUD),
    Product(id="103", name="Essentials 基础营养素", category="营养素", default_price=95.0, currency=Currency.AUD),
    Product(id="115", name="BiOmega 鱼油", category="营养素", default_price=52.0, currency=Currency.AUD),
    Product(id="122", name="Proflavanol C100 葡萄籽", category="抗氧化", default_price=78.0, currency=Currency.AUD),
    Product(id="136", name="Probiotic 益生菌", category="消化", default_price=64.0, currency=Currency.AUD),
    Product(id="210", name="Active Calcium 钙片", category="骨骼", default_price=36.0, currency=Currency.AUD),
    Product(id="301", name="Celavive 洁面乳", category="护肤", default_price=260.0, currency=Currency.CNY),
    Product(id="305", name="Celavive 保湿霜", category="护肤", default_price=420.0, currency=Currency.CNY),
)

_catalog_adapter = TypeAdapter(list[Product])


def load_catalog(path: Optional[str] = None) -> tuple[Product, ...]:
    """
    Load the catalog from a JSON list of products, or the built-in one.

    Product ids must be unique; order is preserved.
    """
    if path is None:
        return DEFAULT_CATALOG

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    products = _catalog_adapter.validate_python(raw)

    seen: set[str] = set()
    for product in products:
        if product.id in seen:
            raise ValueError(f"Duplicate product id in catalog: {product.id}")
        seen.add(product.id)

    return tuple(products)
