"""
Yardbook Payments Engine - application service.

There is no cross-document transaction. A bulk payment is a sequence
of independent merge writes: one per invoice, one for the customer's
credit, and finally the audit record. A failure stops the run and
raises BulkPaymentIncomplete listing every write attempted so far.

Re-submitting the same BulkPaymentRequest (same bulk_payment_id)
resumes it. Invoices re-read from the store that already carry a
payment tagged with the bulk id are counted, not paid again; a credit
already booked under the bulk id is not booked twice; and once the
audit record exists the whole request is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from core.commands.rejection import raise_first_rejection
from core.config import LedgerRules
from core.document_store import DocumentStore, StoreError
from core.money import ZERO, is_positive, round2, store_amount, sum_round2
from core.primitives.document import DocumentType, FinancialDocument, Payment
from core.primitives.party import Customer
from core.time import Clock, get_default_clock
from engines.invoicing.policies import document_must_exist_policy
from engines.invoicing.status import CLOSED_STATUSES
from engines.payments.allocation import (
    age_key,
    allocate,
    apply_payment,
    is_outstanding,
    outstanding_invoices as select_outstanding,
)
from engines.payments.commands import (
    AdjustCreditRequest,
    BulkPaymentRequest,
    RecordPaymentRequest,
)
from engines.payments.events import (
    BULK_PAYMENTS_COLLECTION,
    CUSTOMERS_COLLECTION,
    build_application_entry,
    build_bulk_payment_record,
    default_payment_notes,
)
from engines.payments.policies import (
    amount_must_be_positive_policy,
    credit_must_cover_subtraction_policy,
    customer_must_exist_policy,
    customer_required_policy,
    document_must_accept_payments_policy,
    invoice_must_be_outstanding_policy,
    invoice_selection_must_not_be_empty_policy,
)

logger = logging.getLogger("yardbook.payments")

INVOICES_COLLECTION = DocumentType.INVOICE.collection

OUTCOME_APPLIED = "APPLIED"
OUTCOME_SKIPPED = "SKIPPED"
OUTCOME_FAILED = "FAILED"

OP_INVOICE_PAYMENT = "invoice_payment"
OP_CUSTOMER_CREDIT = "customer_credit"
OP_BULK_RECORD = "bulk_record"


# ══════════════════════════════════════════════════════════════
# RESULTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WriteOutcome:
    """What happened to one store write of a bulk payment."""

    operation: str
    collection: str
    doc_id: str
    status: str
    amount: Optional[Decimal] = None
    error: Optional[str] = None

    @property
    def landed(self) -> bool:
        return self.status in (OUTCOME_APPLIED, OUTCOME_SKIPPED)


@dataclass(frozen=True)
class InvoiceApplication:
    invoice_id: str
    invoice_number: str
    amount_applied: Decimal


@dataclass(frozen=True)
class BulkPaymentResult:
    bulk_payment_id: str
    customer_id: str
    applications: Tuple[InvoiceApplication, ...]
    credited: Decimal
    outcomes: Tuple[WriteOutcome, ...] = ()
    already_recorded: bool = False

    @property
    def total_applied(self) -> Decimal:
        return sum_round2(a.amount_applied for a in self.applications)

    @classmethod
    def from_record(cls, bulk_payment_id: str, record: dict) -> BulkPaymentResult:
        return cls(
            bulk_payment_id=bulk_payment_id,
            customer_id=record["customer_ref"],
            applications=tuple(
                InvoiceApplication(
                    invoice_id=entry["invoice_ref"],
                    invoice_number=entry.get("invoice_number") or "",
                    amount_applied=round2(entry["amount_applied"]),
                )
                for entry in record.get("invoices") or ()
            ),
            credited=round2(record.get("credited_amount") or 0),
            already_recorded=True,
        )


class BulkPaymentIncomplete(StoreError):
    """A bulk payment stopped part way; outcomes say which writes landed."""

    def __init__(self, bulk_payment_id: str, outcomes: Tuple[WriteOutcome, ...], cause: StoreError):
        self.bulk_payment_id = bulk_payment_id
        self.outcomes = outcomes
        failed = outcomes[-1]
        super().__init__(
            f"Bulk payment {bulk_payment_id} incomplete: {failed.operation} "
            f"on {failed.collection}/{failed.doc_id} failed ({cause}). "
            "Re-submit the same request to resume.",
            operation=cause.operation,
            collection=cause.collection,
            doc_id=cause.doc_id,
        )

    @property
    def landed(self) -> Tuple[WriteOutcome, ...]:
        return tuple(o for o in self.outcomes if o.landed)


# ══════════════════════════════════════════════════════════════
# SERVICE
# ══════════════════════════════════════════════════════════════

class PaymentService:
    def __init__(
        self,
        *,
        store: DocumentStore,
        clock: Clock | None = None,
        rules: LedgerRules | None = None,
    ):
        self._store = store
        self._clock = clock or get_default_clock()
        self._rules = rules or LedgerRules.from_settings()

    # ── reads ────────────────────────────────────────────────

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        data = self._store.get(CUSTOMERS_COLLECTION, customer_id)
        return None if data is None else Customer.from_dict(data)

    def _require_customer(self, customer_id: str) -> Customer:
        customer = self.get_customer(customer_id) if customer_id else None
        raise_first_rejection([
            customer_required_policy(customer_id),
            customer_must_exist_policy(customer, customer_id),
        ])
        return customer

    def _get_invoice(self, invoice_id: str) -> Optional[FinancialDocument]:
        data = self._store.get(INVOICES_COLLECTION, invoice_id)
        return None if data is None else FinancialDocument.from_dict(data, DocumentType.INVOICE)

    def customer_invoices(self, customer_id: str) -> List[FinancialDocument]:
        rows = self._store.query(INVOICES_COLLECTION, [("customer_ref", "==", customer_id)])
        return [FinancialDocument.from_dict(row, DocumentType.INVOICE) for row in rows]

    def outstanding_invoices(self, customer_id: str) -> List[FinancialDocument]:
        """Unpaid, unvoided invoices with a balance, oldest first."""
        rows = self._store.query(
            INVOICES_COLLECTION,
            [
                ("customer_ref", "==", customer_id),
                ("status", "not-in", sorted(CLOSED_STATUSES)),
                ("balance_due", ">", 0),
            ],
        )
        invoices = [FinancialDocument.from_dict(row, DocumentType.INVOICE) for row in rows]
        return select_outstanding(invoices, self._rules)

    def list_bulk_payments(self, customer_id: str | None = None) -> List[dict]:
        """Audit records, newest payment date first."""
        filters = [] if customer_id is None else [("customer_ref", "==", customer_id)]
        return self._store.query(BULK_PAYMENTS_COLLECTION, filters, order_by="-payment_date")

    # ── single payment ───────────────────────────────────────

    def record_payment(self, request: RecordPaymentRequest) -> FinancialDocument:
        data = self._store.get(request.doc_type.collection, request.doc_id)
        doc = None if data is None else FinancialDocument.from_dict(data, request.doc_type)
        raise_first_rejection([
            amount_must_be_positive_policy(request.amount),
            document_must_exist_policy(doc, request.doc_id),
        ])
        raise_first_rejection([document_must_accept_payments_policy(doc)])

        payment = Payment(
            amount=request.amount,
            date=request.date,
            method=request.method,
            notes=request.notes,
        )
        updated = apply_payment(doc, payment, self._rules)
        self._store.put(updated.collection, updated.id, updated.financial_fields(), merge=True)
        logger.info(
            "payment %s on %s %s paid=%s balance=%s status=%s",
            payment.amount,
            updated.doc_type.value.lower(),
            updated.document_number,
            updated.amount_paid,
            updated.balance_due,
            updated.status,
        )
        return updated

    # ── bulk payment ─────────────────────────────────────────

    def apply_bulk_payment(self, request: BulkPaymentRequest) -> BulkPaymentResult:
        raise_first_rejection([
            customer_required_policy(request.customer_id),
            amount_must_be_positive_policy(request.amount),
        ])
        self._require_customer(request.customer_id)

        existing = self._store.get(BULK_PAYMENTS_COLLECTION, request.bulk_payment_id)
        if existing is not None:
            logger.info("bulk payment %s already recorded", request.bulk_payment_id)
            return BulkPaymentResult.from_record(request.bulk_payment_id, existing)

        selected = [] if request.deposit_as_credit else self._select_invoices(request)

        outcomes: List[WriteOutcome] = []
        applications: List[InvoiceApplication] = []

        # Shares already booked by an earlier, interrupted run.
        previous: Dict[str, Decimal] = {}
        for invoice in selected:
            booked = sum_round2(
                p.amount for p in invoice.payments if p.bulk_payment_ref == request.bulk_payment_id
            )
            if booked > 0:
                previous[invoice.id] = booked

        remaining = round2(request.amount - sum(previous.values(), ZERO))
        allocations, remainder = allocate(
            remaining,
            [invoice for invoice in selected if invoice.id not in previous],
            self._rules,
        )
        shares = {a.invoice.id: a.amount for a in allocations}

        notes = request.notes or default_payment_notes(request.method, request.date)
        for invoice in selected:
            if invoice.id in previous:
                outcomes.append(WriteOutcome(
                    OP_INVOICE_PAYMENT, INVOICES_COLLECTION, invoice.id,
                    OUTCOME_SKIPPED, previous[invoice.id],
                ))
                applications.append(
                    InvoiceApplication(invoice.id, invoice.document_number, previous[invoice.id])
                )
                continue
            share = shares.get(invoice.id)
            if share is None:
                continue
            payment = Payment(
                id=f"{request.bulk_payment_id}-{invoice.id}",
                amount=share,
                date=request.date,
                method=request.method,
                notes=notes,
                bulk_payment_ref=request.bulk_payment_id,
            )
            updated = apply_payment(invoice, payment, self._rules)
            self._write(
                request, outcomes, OP_INVOICE_PAYMENT, INVOICES_COLLECTION, invoice.id, share,
                updated.financial_fields(),
            )
            applications.append(InvoiceApplication(invoice.id, invoice.document_number, share))

        credited = remainder if is_positive(remainder, self._rules.money_epsilon) else ZERO
        if credited:
            if request.deposit_as_credit:
                logger.info("bulk payment %s deposited %s as credit", request.bulk_payment_id, credited)
            else:
                logger.warning(
                    "bulk payment %s exceeds selected balances; %s credited to customer %s",
                    request.bulk_payment_id,
                    credited,
                    request.customer_id,
                )
            self._book_credit(request, outcomes, credited)

        record = build_bulk_payment_record(
            request,
            applications=[
                build_application_entry(a.invoice_id, a.invoice_number, a.amount_applied)
                for a in applications
            ],
            credited=credited,
            created_at=self._clock.now_utc(),
        )
        self._write(
            request, outcomes, OP_BULK_RECORD, BULK_PAYMENTS_COLLECTION,
            request.bulk_payment_id, request.amount, record, merge=False,
        )
        logger.info(
            "bulk payment %s applied to %d invoice(s), credited %s",
            request.bulk_payment_id,
            len(applications),
            credited,
        )
        return BulkPaymentResult(
            bulk_payment_id=request.bulk_payment_id,
            customer_id=request.customer_id,
            applications=tuple(applications),
            credited=credited,
            outcomes=tuple(outcomes),
        )

    def _select_invoices(self, request: BulkPaymentRequest) -> List[FinancialDocument]:
        if request.invoice_ids is None:
            # Invoices this bulk payment already settled are no longer
            # outstanding but still count toward the amount.
            selected = [
                invoice for invoice in self.customer_invoices(request.customer_id)
                if is_outstanding(invoice, self._rules)
                or any(p.bulk_payment_ref == request.bulk_payment_id for p in invoice.payments)
            ]
        else:
            selected = []
            for invoice_id in dict.fromkeys(request.invoice_ids):
                invoice = self._get_invoice(invoice_id)
                raise_first_rejection([
                    invoice_must_be_outstanding_policy(
                        invoice,
                        invoice_id,
                        request.customer_id,
                        request.bulk_payment_id,
                        self._rules.money_epsilon,
                    )
                ])
                selected.append(invoice)
        raise_first_rejection([
            invoice_selection_must_not_be_empty_policy(
                [invoice.id for invoice in selected],
                request.deposit_as_credit,
            )
        ])
        return sorted(selected, key=age_key)

    def _book_credit(self, request: BulkPaymentRequest, outcomes: List[WriteOutcome], amount: Decimal) -> None:
        customer = self._require_customer(request.customer_id)
        if request.bulk_payment_id in customer.credit_refs:
            outcomes.append(WriteOutcome(
                OP_CUSTOMER_CREDIT, CUSTOMERS_COLLECTION, customer.id, OUTCOME_SKIPPED, amount,
            ))
            return
        updated = customer.with_credit(amount)
        self._write(
            request, outcomes, OP_CUSTOMER_CREDIT, CUSTOMERS_COLLECTION, customer.id, amount,
            {
                "credit_balance": store_amount(updated.credit_balance),
                "credit_refs": self._open_credit_refs(customer) + [request.bulk_payment_id],
            },
        )

    def _open_credit_refs(self, customer: Customer) -> List[str]:
        """Credit refs whose bulk payment has not written its record yet."""
        return [
            ref for ref in customer.credit_refs
            if self._store.get(BULK_PAYMENTS_COLLECTION, ref) is None
        ]

    def _write(
        self,
        request: BulkPaymentRequest,
        outcomes: List[WriteOutcome],
        operation: str,
        collection: str,
        doc_id: str,
        amount: Decimal,
        fields: dict,
        merge: bool = True,
    ) -> None:
        try:
            self._store.put(collection, doc_id, fields, merge=merge)
        except StoreError as exc:
            outcomes.append(WriteOutcome(operation, collection, doc_id, OUTCOME_FAILED, amount, str(exc)))
            logger.warning(
                "bulk payment %s stopped: %s on %s/%s failed: %s",
                request.bulk_payment_id,
                operation,
                collection,
                doc_id,
                exc,
            )
            raise BulkPaymentIncomplete(request.bulk_payment_id, tuple(outcomes), exc) from exc
        outcomes.append(WriteOutcome(operation, collection, doc_id, OUTCOME_APPLIED, amount))

    # ── account credit ───────────────────────────────────────

    def adjust_credit(self, request: AdjustCreditRequest) -> Customer:
        """Manually add to or subtract from a customer's account credit."""
        raise_first_rejection([
            customer_required_policy(request.customer_id),
            amount_must_be_positive_policy(request.amount),
        ])
        customer = self._require_customer(request.customer_id)
        raise_first_rejection([
            credit_must_cover_subtraction_policy(customer, request.signed_amount),
        ])
        updated = customer.with_credit(request.signed_amount)
        self._store.put(
            CUSTOMERS_COLLECTION,
            customer.id,
            {"credit_balance": store_amount(updated.credit_balance)},
            merge=True,
        )
        logger.info(
            "credit %s %s for customer %s -> %s %s",
            request.direction,
            request.amount,
            customer.id,
            updated.credit_balance,
            request.notes,
        )
        return updated
