"""
Yardbook Invoicing Engine — Status Derivation
==============================================
A document carries two axes:

    workflow_status  what the operator (or fulfillment) last set
    payment state    derived from total / amount_paid / balance_due

The externally visible status combines them with a fixed precedence,
evaluated on every save:

    1. workflow Voided                      -> Voided
    2. total > eps and balance_due <= eps   -> Paid
    3. total > eps, paid > 0, balance > eps -> Partially Paid
    4. total <= eps and balance_due <= eps  -> Paid
    5. otherwise                            -> workflow status unchanged
"""

from __future__ import annotations

from typing import Optional

from core.money import EPSILON, Amount, is_positive, is_settled, to_decimal
from core.primitives.document import DocumentType

DRAFT = "Draft"
SENT = "Sent"
ORDERED = "Ordered"
PARTIAL_PACKED = "Partial Packed"
PACKED = "Packed"
READY_FOR_PICK_UP = "Ready for pick up"
PICKED_UP = "Picked up"
INVOICED = "Invoiced"
ACCEPTED = "Accepted"
REJECTED = "Rejected"
PARTIALLY_PAID = "Partially Paid"
PAID = "Paid"
VOIDED = "Voided"

INVOICE_STATUSES = (
    DRAFT,
    SENT,
    ORDERED,
    PARTIAL_PACKED,
    PACKED,
    READY_FOR_PICK_UP,
    PICKED_UP,
    PARTIALLY_PAID,
    PAID,
    VOIDED,
)

ORDER_STATUSES = (
    DRAFT,
    ORDERED,
    READY_FOR_PICK_UP,
    PICKED_UP,
    INVOICED,
    PARTIALLY_PAID,
    PAID,
    VOIDED,
)

ESTIMATE_STATUSES = (DRAFT, SENT, ACCEPTED, REJECTED, VOIDED)

STATUSES_BY_TYPE = {
    DocumentType.INVOICE: INVOICE_STATUSES,
    DocumentType.ORDER: ORDER_STATUSES,
    DocumentType.ESTIMATE: ESTIMATE_STATUSES,
}

# Payment axis
PAYMENT_PAID = "PAID"
PAYMENT_PARTIALLY_PAID = "PARTIALLY_PAID"
PAYMENT_UNPAID = "UNPAID"

# Settled documents are excluded from the outstanding set.
CLOSED_STATUSES = frozenset({PAID, VOIDED})


def payment_state(
    total: Amount,
    amount_paid: Amount,
    balance_due: Amount,
    epsilon: Amount = EPSILON,
) -> str:
    """The payment axis on its own; a zero-total document counts as paid."""
    if is_settled(balance_due, epsilon):
        return PAYMENT_PAID
    if is_positive(total, epsilon) and to_decimal(amount_paid) > 0:
        return PAYMENT_PARTIALLY_PAID
    return PAYMENT_UNPAID


def derive_status(
    workflow_status: Optional[str],
    total: Amount,
    amount_paid: Amount,
    balance_due: Amount,
    epsilon: Amount = EPSILON,
) -> str:
    if workflow_status == VOIDED:
        return VOIDED

    state = payment_state(total, amount_paid, balance_due, epsilon)
    if state == PAYMENT_PAID:
        return PAID
    if state == PAYMENT_PARTIALLY_PAID:
        return PARTIALLY_PAID
    return workflow_status or DRAFT


def workflow_from_status(status: Optional[str]) -> Optional[str]:
    """
    Recover the workflow axis from a stored single status.

    Payment statuses are derived, so they never count as a workflow
    status; the caller falls back to the previous workflow value.
    """
    if status in (PAID, PARTIALLY_PAID):
        return None
    return status


def status_for_document(
    doc_type: DocumentType,
    workflow_status: Optional[str],
    total: Amount,
    amount_paid: Amount,
    balance_due: Amount,
    epsilon: Amount = EPSILON,
) -> str:
    if not doc_type.carries_payments:
        return workflow_status or DRAFT
    return derive_status(workflow_status, total, amount_paid, balance_due, epsilon)


def is_valid_status(doc_type: DocumentType, status: str) -> bool:
    return status in STATUSES_BY_TYPE[doc_type]
