"""
Yardbook Payments Engine — Pure Payment Application
=====================================================
No store access here. The service reads, calls these, and writes.

apply_payment() touches only the one document it is given.
allocate() fills the selected invoices oldest first, each taking
min(remaining, balance_due), and reports what is left over.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from core.config import DEFAULT_RULES, LedgerRules
from core.money import ZERO, is_positive, round2
from core.primitives.document import FinancialDocument, Payment
from engines.invoicing.recalculate import recalculate_payments
from engines.invoicing.status import CLOSED_STATUSES

logger = logging.getLogger("yardbook.payments")


@dataclass(frozen=True)
class Allocation:
    invoice: FinancialDocument
    amount: Decimal


def apply_payment(
    doc: FinancialDocument,
    payment: Payment,
    rules: LedgerRules = DEFAULT_RULES,
) -> FinancialDocument:
    """Append the payment and recompute amount_paid, balance_due and status."""
    if not doc.doc_type.carries_payments:
        raise ValueError(f"{doc.doc_type.value} documents do not carry payments.")
    updated = recalculate_payments(replace(doc, payments=doc.payments + (payment,)), rules)
    if updated.balance_due < -rules.money_epsilon:
        logger.warning(
            "%s %s overpaid by %s",
            doc.doc_type.value.lower(),
            doc.document_number,
            -updated.balance_due,
        )
    return updated


def age_key(doc: FinancialDocument) -> Tuple[datetime, str]:
    """Oldest first: due date when set, else the document date."""
    return (doc.due_date or doc.date, doc.document_number)


def is_outstanding(doc: FinancialDocument, rules: LedgerRules = DEFAULT_RULES) -> bool:
    return doc.status not in CLOSED_STATUSES and is_positive(doc.balance_due, rules.money_epsilon)


def outstanding_invoices(
    invoices: Iterable[FinancialDocument],
    rules: LedgerRules = DEFAULT_RULES,
) -> List[FinancialDocument]:
    return sorted((doc for doc in invoices if is_outstanding(doc, rules)), key=age_key)


def allocate(
    amount: Decimal,
    invoices: Sequence[FinancialDocument],
    rules: LedgerRules = DEFAULT_RULES,
) -> Tuple[List[Allocation], Decimal]:
    """
    Spread amount over invoices in the given order.

    Returns the allocations (invoices that receive nothing are left
    out) and the remainder, which the caller credits to the customer.
    """
    remaining = round2(amount)
    allocations: List[Allocation] = []
    for invoice in invoices:
        if not is_positive(remaining, rules.money_epsilon):
            break
        share = round2(min(remaining, invoice.balance_due))
        if not is_positive(share, rules.money_epsilon):
            continue
        allocations.append(Allocation(invoice=invoice, amount=share))
        remaining = round2(remaining - share)
    return allocations, max(remaining, ZERO)
