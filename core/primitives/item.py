"""
Yardbook Item Primitive — Catalog Product
==========================================
The catalog entry a line item references through product_ref.

RULES (NON-NEGOTIABLE):
- price, cost and markup are non-negative
- Unit of measure is explicit ("unit" when nothing better is known)
- quantity_in_stock is moved by receiving, not by invoicing

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.money import ZERO, round2, store_amount, to_decimal
from core.time.clock import parse_iso, to_iso

DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_UNIT = "unit"


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    category: str = DEFAULT_CATEGORY
    unit: str = DEFAULT_UNIT
    cost: Decimal = ZERO
    markup_percent: Decimal = Decimal(0)
    quantity_in_stock: Decimal = Decimal(0)
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("product name must be non-empty.")
        object.__setattr__(self, "price", round2(self.price))
        object.__setattr__(self, "cost", round2(self.cost))
        object.__setattr__(self, "markup_percent", to_decimal(self.markup_percent))
        object.__setattr__(self, "quantity_in_stock", to_decimal(self.quantity_in_stock))
        for name in ("price", "cost", "markup_percent"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}.")

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "price": store_amount(self.price),
            "cost": store_amount(self.cost),
            "markup_percent": float(self.markup_percent),
            "quantity_in_stock": float(self.quantity_in_stock),
            "created_at": None if self.created_at is None else to_iso(self.created_at),
        }
        if self.id:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Product:
        return cls(
            id=data.get("id") or "",
            name=data["name"],
            price=data.get("price") or 0,
            category=data.get("category") or DEFAULT_CATEGORY,
            unit=data.get("unit") or DEFAULT_UNIT,
            cost=data.get("cost") or 0,
            markup_percent=data.get("markup_percent") or 0,
            quantity_in_stock=data.get("quantity_in_stock") or 0,
            created_at=parse_iso(data.get("created_at")),
        )
