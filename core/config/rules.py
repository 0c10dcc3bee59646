"""
Yardbook Core Config — Engine Rules
=====================================
Doctrine: no magic numbers in engine logic.
Money tolerance, reminder thresholds and receiving tolerance come
from one frozen rule set, overridable through Django settings:

    YARDBOOK_RULES = {
        "money_epsilon": "0.005",
        "pickup_reminder_business_days": 7,
    }
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from core.money import EPSILON, to_decimal


# ══════════════════════════════════════════════════════════════
# LEDGER RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerRules:
    """
    Tunables shared by the invoicing, payment and fulfillment engines.

    money_epsilon:                 half a cent; "paid off" tolerance
    pickup_reminder_business_days: Mon–Fri days before a pickup reminder
    over_receipt_tolerance:        how far received may exceed ordered
    tax_rate:                      0 means no tax engine (tax_amount = 0)
    """

    money_epsilon: Decimal = EPSILON
    pickup_reminder_business_days: int = 7
    over_receipt_tolerance: Decimal = Decimal(0)
    tax_rate: Decimal = Decimal(0)

    def __post_init__(self) -> None:
        for name in ("money_epsilon", "over_receipt_tolerance", "tax_rate"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if self.money_epsilon < 0:
            raise ValueError("money_epsilon must be non-negative.")
        if self.pickup_reminder_business_days < 0:
            raise ValueError("pickup_reminder_business_days must be non-negative.")
        if self.over_receipt_tolerance < 0:
            raise ValueError("over_receipt_tolerance must be non-negative.")
        if not 0 <= self.tax_rate <= 1:
            raise ValueError(f"tax_rate must be between 0 and 1, got {self.tax_rate}.")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LedgerRules":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown ledger rule keys: {sorted(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_settings(cls) -> "LedgerRules":
        """Read YARDBOOK_RULES from Django settings (defaults if absent)."""
        from django.conf import settings

        return cls.from_mapping(getattr(settings, "YARDBOOK_RULES", None))


DEFAULT_RULES = LedgerRules()
