"""
Yardbook Core Money — Public API
=================================
Canonical 2-decimal rounding and epsilon-tolerant comparison.
"""

from core.money.rounding import (
    CENT,
    EPSILON,
    ZERO,
    Amount,
    approx_equal,
    is_positive,
    is_settled,
    store_amount,
    round2,
    sum_round2,
    to_decimal,
)

__all__ = [
    "Amount",
    "CENT",
    "EPSILON",
    "ZERO",
    "approx_equal",
    "is_positive",
    "is_settled",
    "store_amount",
    "round2",
    "sum_round2",
    "to_decimal",
]
