"""
Yardbook Core Money — Rounding Discipline
===========================================
Every currency value that is stored passes through round2().
Every "is this paid off" comparison goes through approx_equal()
or the epsilon-aware helpers below.

RULES:
- Arithmetic is Decimal. Floats are converted via str() so that
  1.005 rounds the way it reads, not the way it is stored in binary.
- Rounding is half-up to 2 places.
- Two amounts within half a cent are equal.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
EPSILON = Decimal("0.005")


def to_decimal(value: Amount | None) -> Decimal:
    """Convert a stored or user-entered amount to Decimal. None is zero."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a currency amount.")
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a currency amount: {value!r}") from exc


def round2(value: Amount | None) -> Decimal:
    """Round half-up to cents."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def approx_equal(a: Amount, b: Amount, epsilon: Amount = EPSILON) -> bool:
    return abs(to_decimal(a) - to_decimal(b)) <= to_decimal(epsilon)


def is_settled(amount: Amount, epsilon: Amount = EPSILON) -> bool:
    """True when an amount is zero or below, within epsilon."""
    return to_decimal(amount) <= to_decimal(epsilon)


def is_positive(amount: Amount, epsilon: Amount = EPSILON) -> bool:
    return to_decimal(amount) > to_decimal(epsilon)


def sum_round2(values) -> Decimal:
    """Sum then round once. Summing rounded values twice drifts."""
    total = Decimal(0)
    for value in values:
        total += to_decimal(value)
    return round2(total)


def store_amount(value: Amount | None) -> float:
    """
    Serialize for the document store (JSON has no Decimal).

    A cent-rounded value survives the float round trip: to_decimal()
    reads floats through repr(), which is the shortest exact form.
    """
    return float(round2(value))
