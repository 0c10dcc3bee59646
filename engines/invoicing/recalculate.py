"""Yardbook Invoicing Engine - full recomputation of derived fields."""

from __future__ import annotations

from dataclasses import replace

from core.config import DEFAULT_RULES, LedgerRules
from core.primitives.document import FinancialDocument
from engines.invoicing.status import status_for_document, workflow_from_status
from engines.invoicing.totals import (
    compute_payment_totals,
    compute_totals,
    recompute_line_items,
    tax_for,
)


def resolve_workflow_status(doc: FinancialDocument) -> str | None:
    """
    The workflow axis of a document.

    Older records carry only the combined status; in that case the
    workflow axis is recovered from it when it is not a payment status.
    """
    if doc.workflow_status:
        return doc.workflow_status
    return workflow_from_status(doc.status)


def recalculate(doc: FinancialDocument, rules: LedgerRules = DEFAULT_RULES) -> FinancialDocument:
    """Recompute line totals, document totals, payment totals and status."""
    items = recompute_line_items(doc.line_items)
    pre_tax = compute_totals(items)
    totals = compute_totals(items, tax_for(pre_tax.subtotal, rules.tax_rate))
    paid = compute_payment_totals(totals.total, doc.payments)
    workflow = resolve_workflow_status(doc)
    status = status_for_document(
        doc.doc_type,
        workflow,
        totals.total,
        paid.amount_paid,
        paid.balance_due,
        rules.money_epsilon,
    )
    return replace(
        doc,
        line_items=items,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        total=totals.total,
        amount_paid=paid.amount_paid,
        balance_due=paid.balance_due,
        workflow_status=workflow,
        status=status,
    )


def recalculate_payments(doc: FinancialDocument, rules: LedgerRules = DEFAULT_RULES) -> FinancialDocument:
    """Recompute only the payment-derived fields, trusting the stored total."""
    paid = compute_payment_totals(doc.total, doc.payments)
    workflow = resolve_workflow_status(doc)
    status = status_for_document(
        doc.doc_type,
        workflow,
        doc.total,
        paid.amount_paid,
        paid.balance_due,
        rules.money_epsilon,
    )
    return replace(
        doc,
        amount_paid=paid.amount_paid,
        balance_due=paid.balance_due,
        workflow_status=workflow,
        status=status,
    )
