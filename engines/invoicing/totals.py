"""
Yardbook Invoicing Engine — Line Item Totals
=============================================
Pure functions, independent of document type. Running them twice on
the same input gives the same output.

    line total = round2(quantity * unit_price), negated for returns
    subtotal   = round2(sum of line totals)
    total      = round2(subtotal + tax_amount)
    amount_paid = round2(sum of payments)
    balance_due = round2(total - amount_paid)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Sequence, Tuple

from core.money import Amount, ZERO, round2, sum_round2, to_decimal
from core.primitives.document import LineItem, Payment

logger = logging.getLogger("yardbook.documents")


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class PaymentTotals:
    amount_paid: Decimal
    balance_due: Decimal


def line_total(item: LineItem) -> Decimal:
    amount = round2(item.quantity * item.unit_price)
    return -amount if item.is_return else amount


def recompute_line_items(items: Iterable[LineItem]) -> Tuple[LineItem, ...]:
    """Rewrite every item's stored total from its quantity and price."""
    return tuple(replace(item, total=line_total(item)) for item in items)


def compute_totals(items: Sequence[LineItem], tax_amount: Amount = ZERO) -> DocumentTotals:
    subtotal = sum_round2(line_total(item) for item in items)
    tax = round2(tax_amount)
    total = round2(subtotal + tax)
    logger.debug("totals lines=%d subtotal=%s tax=%s total=%s", len(items), subtotal, tax, total)
    return DocumentTotals(subtotal=subtotal, tax_amount=tax, total=total)


def tax_for(subtotal: Amount, tax_rate: Amount) -> Decimal:
    """Tax on the subtotal; a zero rate yields zero."""
    return round2(to_decimal(subtotal) * to_decimal(tax_rate))


def compute_payment_totals(total: Amount, payments: Iterable[Payment]) -> PaymentTotals:
    amount_paid = sum_round2(payment.amount for payment in payments)
    balance_due = round2(to_decimal(total) - amount_paid)
    return PaymentTotals(amount_paid=amount_paid, balance_due=balance_due)
