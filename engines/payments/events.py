"""Yardbook Payments Engine - collections and record builders."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable

from core.money import store_amount
from core.time.clock import to_iso

CUSTOMERS_COLLECTION = "customers"
BULK_PAYMENTS_COLLECTION = "bulk_payments"


def default_payment_notes(method: str, date: datetime) -> str:
    return f"Payment received via {method} on {date.month}/{date.day}/{date.year}"


def build_application_entry(invoice_id: str, invoice_number: str, amount: Decimal) -> dict:
    return {
        "invoice_ref": invoice_id,
        "invoice_number": invoice_number,
        "amount_applied": store_amount(amount),
    }


def build_bulk_payment_record(
    request,
    *,
    applications: Iterable[dict],
    credited: Decimal,
    created_at: datetime,
) -> dict:
    """The append-only audit record of one bulk payment."""
    return {
        "customer_ref": request.customer_id,
        "payment_amount": store_amount(request.amount),
        "payment_date": to_iso(request.date),
        "payment_method": request.method,
        "payment_notes": request.notes,
        "deposit_as_credit": request.deposit_as_credit,
        "invoices": list(applications),
        "credited_amount": store_amount(credited),
        "created_at": to_iso(created_at),
    }
