"""Yardbook Payments Engine - policies."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from core.commands.rejection import ReasonCode, RejectionReason
from core.money import EPSILON, is_positive
from core.primitives.document import FinancialDocument
from core.primitives.party import Customer
from engines.invoicing.status import CLOSED_STATUSES, VOIDED


def customer_required_policy(customer_id: str) -> RejectionReason | None:
    if not customer_id:
        return RejectionReason(
            code=ReasonCode.CUSTOMER_REQUIRED,
            message="Select a customer before recording a payment.",
            policy_name="customer_required_policy",
        )
    return None


def customer_must_exist_policy(
    customer: Optional[Customer],
    customer_id: str,
) -> RejectionReason | None:
    if customer_id and customer is None:
        return RejectionReason(
            code=ReasonCode.CUSTOMER_NOT_FOUND,
            message=f"Customer '{customer_id}' not found.",
            policy_name="customer_must_exist_policy",
        )
    return None


def amount_must_be_positive_policy(amount: Decimal) -> RejectionReason | None:
    if amount <= 0:
        return RejectionReason(
            code=ReasonCode.NON_POSITIVE_AMOUNT,
            message=f"Payment amount must be greater than zero, got {amount}.",
            policy_name="amount_must_be_positive_policy",
        )
    return None


def invoice_selection_must_not_be_empty_policy(
    invoice_ids: Sequence[str],
    deposit_as_credit: bool,
) -> RejectionReason | None:
    if not deposit_as_credit and not invoice_ids:
        return RejectionReason(
            code=ReasonCode.EMPTY_INVOICE_SELECTION,
            message="Select at least one invoice or deposit the payment as credit.",
            policy_name="invoice_selection_must_not_be_empty_policy",
        )
    return None


def invoice_must_be_outstanding_policy(
    invoice: Optional[FinancialDocument],
    invoice_id: str,
    customer_id: str,
    bulk_payment_id: str,
    epsilon: Decimal = EPSILON,
) -> RejectionReason | None:
    """
    A selected invoice must belong to the paying customer and still owe
    money, unless it already carries a payment from this bulk payment
    (a resumed run).
    """
    if invoice is None:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_NOT_FOUND,
            message=f"Invoice '{invoice_id}' not found.",
            policy_name="invoice_must_be_outstanding_policy",
        )
    if invoice.customer_ref != customer_id:
        return RejectionReason(
            code=ReasonCode.INVOICE_CUSTOMER_MISMATCH,
            message=f"Invoice {invoice.document_number} belongs to another customer.",
            policy_name="invoice_must_be_outstanding_policy",
        )
    if any(p.bulk_payment_ref == bulk_payment_id for p in invoice.payments):
        return None
    if invoice.status in CLOSED_STATUSES or not is_positive(invoice.balance_due, epsilon):
        return RejectionReason(
            code=ReasonCode.INVOICE_NOT_OUTSTANDING,
            message=f"Invoice {invoice.document_number} has no balance due.",
            policy_name="invoice_must_be_outstanding_policy",
        )
    return None


def document_must_accept_payments_policy(doc: FinancialDocument) -> RejectionReason | None:
    if not doc.doc_type.carries_payments:
        return RejectionReason(
            code=ReasonCode.PAYMENTS_NOT_ALLOWED,
            message=f"{doc.doc_type.value.title()}s do not take payments.",
            policy_name="document_must_accept_payments_policy",
        )
    if doc.status == VOIDED:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_VOIDED,
            message=f"{doc.document_number} is voided.",
            policy_name="document_must_accept_payments_policy",
        )
    return None


def credit_must_cover_subtraction_policy(
    customer: Customer,
    signed_amount: Decimal,
) -> RejectionReason | None:
    if customer.credit_balance + signed_amount < 0:
        return RejectionReason(
            code=ReasonCode.INSUFFICIENT_CREDIT,
            message=(
                f"Cannot subtract {-signed_amount}; "
                f"credit balance is {customer.credit_balance}."
            ),
            policy_name="credit_must_cover_subtraction_policy",
        )
    return None
