"""
Yardbook Party Primitive — Customer and Pricing Rules
======================================================
A customer carries a running credit balance and an ordered list of
category markup rules used when pricing catalog items for them.

RULES (NON-NEGOTIABLE):
- credit_balance is never negative
- credit_balance changes only through the payments engine
- A rule for a specific category wins over the "All Categories" rule

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Tuple

from core.money import ZERO, round2, store_amount, to_decimal

ALL_CATEGORIES = "All Categories"


# ══════════════════════════════════════════════════════════════
# PRICING RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MarkupRule:
    """Markup percent applied on top of cost for one category."""

    category: str
    markup_percent: Decimal

    def __post_init__(self):
        if not self.category:
            raise ValueError("category must be non-empty.")
        object.__setattr__(self, "markup_percent", to_decimal(self.markup_percent))
        if self.markup_percent < 0:
            raise ValueError(
                f"markup_percent must be non-negative, got {self.markup_percent}."
            )

    @property
    def is_wildcard(self) -> bool:
        return self.category == ALL_CATEGORIES

    def to_dict(self) -> dict:
        return {"category": self.category, "markup_percent": float(self.markup_percent)}

    @classmethod
    def from_dict(cls, data: dict) -> MarkupRule:
        return cls(category=data["category"], markup_percent=data["markup_percent"])


# ══════════════════════════════════════════════════════════════
# CUSTOMER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    credit_balance: Decimal = ZERO
    pricing_rules: Tuple[MarkupRule, ...] = ()
    email: str = ""
    phone: str = ""
    # bulk payment ids whose remainder already landed in credit_balance
    credit_refs: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.id:
            raise ValueError("customer id must be non-empty.")
        object.__setattr__(self, "credit_balance", round2(self.credit_balance))
        object.__setattr__(self, "pricing_rules", tuple(self.pricing_rules))
        object.__setattr__(self, "credit_refs", tuple(self.credit_refs))
        if self.credit_balance < 0:
            raise ValueError(
                f"credit_balance cannot be negative, got {self.credit_balance}."
            )

    def with_credit(self, delta: Decimal) -> Customer:
        return replace(self, credit_balance=round2(self.credit_balance + to_decimal(delta)))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "credit_balance": store_amount(self.credit_balance),
            "pricing_rules": [rule.to_dict() for rule in self.pricing_rules],
            "email": self.email,
            "phone": self.phone,
            "credit_refs": list(self.credit_refs),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Customer:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            credit_balance=data.get("credit_balance") or 0,
            pricing_rules=tuple(
                MarkupRule.from_dict(r) for r in data.get("pricing_rules") or ()
            ),
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            credit_refs=tuple(data.get("credit_refs") or ()),
        )
