"""Yardbook Catalog Engine - collections and record builders."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.money import store_amount
from core.primitives.item import Product
from core.time.clock import to_iso

PRODUCTS_COLLECTION = "products"
PRICE_HISTORY_COLLECTION = "price_history"

PROMOTION_REASON = "Created from non-stock line item"

# Per-line quantities a product has already taken into stock, keyed by
# receipt_key(). Stored on the product so stock and mark move together.
RECEIPT_MARKS_FIELD = "receipt_marks"


def receipt_key(collection: str, doc_id: str, line_id: str) -> str:
    return f"{collection}/{doc_id}/{line_id}"


def promoted_product_id(collection: str, doc_id: str, line_id: str) -> str:
    return f"{collection}-{doc_id}-{line_id}"


def price_fields_changed(old: Optional[Product], new: Product) -> bool:
    if old is None:
        return True
    return (
        old.cost != new.cost
        or old.price != new.price
        or old.markup_percent != new.markup_percent
    )


def build_price_history_entry(
    old: Optional[Product],
    new: Product,
    *,
    timestamp: datetime,
    changed_by: Optional[str] = None,
    reason: Optional[str] = None,
) -> dict:
    entry = {
        "product_id": new.id,
        "product_name": new.name,
        "timestamp": to_iso(timestamp),
        "old_cost": None if old is None else store_amount(old.cost),
        "new_cost": store_amount(new.cost),
        "old_price": None if old is None else store_amount(old.price),
        "new_price": store_amount(new.price),
        "old_markup": None if old is None else float(old.markup_percent),
        "new_markup": float(new.markup_percent),
        "changed_by": changed_by,
        "reason": reason,
    }
    return {key: value for key, value in entry.items() if value is not None}
