"""Yardbook Payments Engine - request commands."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from core.money import to_decimal
from core.primitives.document import PAYMENT_METHODS, DocumentType

CREDIT_ADD = "add"
CREDIT_SUBTRACT = "subtract"
CREDIT_DIRECTIONS = frozenset({CREDIT_ADD, CREDIT_SUBTRACT})


def _check_method(method: str) -> None:
    if method not in PAYMENT_METHODS:
        raise ValueError(
            f"payment method '{method}' not valid. "
            f"Must be one of: {list(PAYMENT_METHODS)}"
        )


@dataclass(frozen=True)
class RecordPaymentRequest:
    """One payment against one order or invoice."""

    doc_type: DocumentType
    doc_id: str
    amount: Decimal
    date: datetime
    method: str
    notes: str = ""

    def __post_init__(self):
        if not isinstance(self.doc_type, DocumentType):
            raise ValueError("doc_type must be DocumentType enum.")
        if not self.doc_id:
            raise ValueError("doc_id must be non-empty.")
        if not isinstance(self.date, datetime):
            raise ValueError("date must be datetime.")
        object.__setattr__(self, "amount", to_decimal(self.amount))
        _check_method(self.method)


@dataclass(frozen=True)
class BulkPaymentRequest:
    """
    One customer payment spread over several invoices, or deposited
    whole as account credit.

    invoice_ids=None selects every outstanding invoice of the customer;
    an explicit empty selection is refused unless depositing as credit.
    bulk_payment_id is the idempotency key: re-submitting the same
    request resumes a partially applied run instead of repeating it.
    """

    customer_id: str
    amount: Decimal
    date: datetime
    method: str
    notes: str = ""
    invoice_ids: Optional[Tuple[str, ...]] = None
    deposit_as_credit: bool = False
    bulk_payment_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if not isinstance(self.date, datetime):
            raise ValueError("date must be datetime.")
        if not self.bulk_payment_id:
            raise ValueError("bulk_payment_id must be non-empty.")
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.invoice_ids is not None:
            object.__setattr__(self, "invoice_ids", tuple(self.invoice_ids))
        if self.deposit_as_credit and self.invoice_ids:
            raise ValueError("A credit deposit cannot also select invoices.")
        _check_method(self.method)


@dataclass(frozen=True)
class AdjustCreditRequest:
    customer_id: str
    amount: Decimal
    direction: str = CREDIT_ADD
    notes: str = ""

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.direction not in CREDIT_DIRECTIONS:
            raise ValueError(
                f"direction '{self.direction}' not valid. "
                f"Must be one of: {sorted(CREDIT_DIRECTIONS)}"
            )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction == CREDIT_ADD else -self.amount
