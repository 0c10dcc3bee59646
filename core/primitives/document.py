"""
Yardbook Document Primitive — Estimates, Orders, Invoices
==========================================================
The three financial documents share one shape and differ only in
their status vocabulary. Line items and payments are owned by the
document they are embedded in; payments are never shared.

RULES (NON-NEGOTIABLE):
- Money is Decimal inside the process, cent-rounded numbers in the store
- line_item.total == round2(quantity * unit_price), negated for returns
- amount_paid == round2(sum(payments)); balance_due == round2(total - amount_paid)
- Derived fields are recomputed by the engines, never trusted from input
- A finalized document accepts no edits other than unfinalize

This file contains NO persistence logic and NO derivation logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.money import ZERO, round2, store_amount, to_decimal
from core.time.clock import parse_iso, to_iso


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class DocumentType(Enum):
    ESTIMATE = "ESTIMATE"
    ORDER = "ORDER"
    INVOICE = "INVOICE"

    @property
    def collection(self) -> str:
        return DOCUMENT_COLLECTIONS[self]

    @property
    def carries_payments(self) -> bool:
        return self is not DocumentType.ESTIMATE


DOCUMENT_COLLECTIONS: Dict[DocumentType, str] = {
    DocumentType.ESTIMATE: "estimates",
    DocumentType.ORDER: "orders",
    DocumentType.INVOICE: "invoices",
}

PAYMENT_METHODS = (
    "Cash",
    "Check",
    "Credit Card",
    "Debit Card",
    "ACH",
    "Other",
)


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


def _optional_amount(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else store_amount(value)


def _quantity_out(value: Decimal) -> float | int:
    """Whole quantities are stored as ints, fractional lengths as floats."""
    return int(value) if value == value.to_integral_value() else float(value)


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """
    One priced line on a document.

    product_ref is set for catalog items and absent for non-stock items.
    add_to_product_list asks the save path to promote a non-stock item
    into the catalog. received_quantity belongs to the fulfillment view.
    """

    id: str
    name: str
    quantity: Decimal
    unit_price: Decimal
    product_ref: Optional[str] = None
    cost: Optional[Decimal] = None
    markup_percent: Optional[Decimal] = None
    is_return: bool = False
    is_non_stock: bool = False
    add_to_product_list: bool = False
    category: Optional[str] = None
    unit: Optional[str] = None
    total: Decimal = ZERO
    received_quantity: Decimal = Decimal(0)

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("line item id must be a non-empty string.")
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", round2(self.unit_price))
        object.__setattr__(self, "total", to_decimal(self.total))
        object.__setattr__(self, "received_quantity", to_decimal(self.received_quantity))
        object.__setattr__(self, "cost", None if self.cost is None else round2(self.cost))
        object.__setattr__(self, "markup_percent", _optional_decimal(self.markup_percent))

        if self.quantity < 0:
            raise ValueError(f"quantity must be non-negative, got {self.quantity}.")
        if self.unit_price < 0:
            raise ValueError(f"unit_price must be non-negative, got {self.unit_price}.")
        if self.cost is not None and self.cost < 0:
            raise ValueError(f"cost must be non-negative, got {self.cost}.")
        if self.markup_percent is not None and self.markup_percent < 0:
            raise ValueError(f"markup_percent must be non-negative, got {self.markup_percent}.")
        if self.received_quantity < 0:
            raise ValueError(
                f"received_quantity must be non-negative, got {self.received_quantity}."
            )

    @classmethod
    def new(cls, **kwargs) -> LineItem:
        kwargs.setdefault("id", uuid.uuid4().hex)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "quantity": _quantity_out(self.quantity),
            "unit_price": store_amount(self.unit_price),
            "is_return": self.is_return,
            "is_non_stock": self.is_non_stock,
            "total": store_amount(self.total),
            "received_quantity": _quantity_out(self.received_quantity),
        }
        optional = {
            "product_ref": self.product_ref,
            "cost": _optional_amount(self.cost),
            "markup_percent": None if self.markup_percent is None else float(self.markup_percent),
            "category": self.category,
            "unit": self.unit,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.add_to_product_list:
            data["add_to_product_list"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            quantity=data.get("quantity", 0),
            unit_price=data.get("unit_price", 0),
            product_ref=data.get("product_ref"),
            cost=data.get("cost"),
            markup_percent=data.get("markup_percent"),
            is_return=bool(data.get("is_return", False)),
            is_non_stock=bool(data.get("is_non_stock", False)),
            add_to_product_list=bool(data.get("add_to_product_list", False)),
            category=data.get("category"),
            unit=data.get("unit"),
            total=data.get("total", 0),
            received_quantity=data.get("received_quantity") or 0,
        )


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Payment:
    """
    A payment embedded in exactly one document.

    bulk_payment_ref links a synthetic payment back to the bulk
    payment that produced it; it is also the idempotency key when a
    half-applied bulk payment is retried.
    """

    amount: Decimal
    date: datetime
    method: str
    notes: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    bulk_payment_ref: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", round2(self.amount))
        if self.amount <= 0:
            raise ValueError(f"payment amount must be positive, got {self.amount}.")
        if not isinstance(self.date, datetime):
            raise TypeError("payment date must be datetime.")
        if self.method not in PAYMENT_METHODS:
            raise ValueError(
                f"payment method '{self.method}' not valid. "
                f"Must be one of: {list(PAYMENT_METHODS)}"
            )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "amount": store_amount(self.amount),
            "date": to_iso(self.date),
            "method": self.method,
            "notes": self.notes,
        }
        if self.bulk_payment_ref:
            data["bulk_payment_ref"] = self.bulk_payment_ref
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Payment:
        return cls(
            id=data.get("id") or uuid.uuid4().hex,
            amount=data["amount"],
            date=parse_iso(data["date"]),
            method=data["method"],
            notes=data.get("notes") or "",
            bulk_payment_ref=data.get("bulk_payment_ref"),
        )


# ══════════════════════════════════════════════════════════════
# FINANCIAL DOCUMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FinancialDocument:
    """
    Estimate | Order | Invoice.

    status is the single externally visible status. workflow_status is
    the manual / fulfillment axis the operator sets; the payment axis is
    derived from totals and takes precedence once fully paid.

    The shop_* and *_date fields form the fulfillment view. It exists
    once a distributor (vendor) is attached and has no deletion path of
    its own.
    """

    id: str
    doc_type: DocumentType
    document_number: str
    customer_ref: str
    date: datetime
    line_items: Tuple[LineItem, ...] = ()
    payments: Tuple[Payment, ...] = ()
    due_date: Optional[datetime] = None
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO
    amount_paid: Decimal = ZERO
    balance_due: Decimal = ZERO
    status: str = "Draft"
    workflow_status: Optional[str] = None
    is_finalized: bool = False
    notes: str = ""
    po_number: str = ""
    source_ref: Optional[str] = None
    # ── fulfillment view ──────────────────────────────────────
    distributor: Optional[str] = None
    shop_status: Optional[str] = None
    expected_delivery_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    received_by: Optional[str] = None
    ready_for_pick_up_date: Optional[datetime] = None
    picked_up_date: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.doc_type, DocumentType):
            raise ValueError("doc_type must be DocumentType enum.")
        if not isinstance(self.date, datetime):
            raise TypeError("date must be datetime.")
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "payments", tuple(self.payments))
        for name in ("subtotal", "tax_amount", "total", "amount_paid", "balance_due"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if self.payments and not self.doc_type.carries_payments:
            raise ValueError(f"{self.doc_type.value} documents do not carry payments.")

    @property
    def collection(self) -> str:
        return self.doc_type.collection

    @property
    def has_fulfillment_view(self) -> bool:
        return bool(self.distributor)

    def line_item(self, line_id: str) -> Optional[LineItem]:
        for item in self.line_items:
            if item.id == line_id:
                return item
        return None

    def evolve(self, **changes) -> FinancialDocument:
        return replace(self, **changes)

    # ── serialization ────────────────────────────────────────

    def financial_fields(self) -> dict:
        """The derived fields a payment write touches."""
        return {
            "payments": [p.to_dict() for p in self.payments],
            "amount_paid": store_amount(self.amount_paid),
            "balance_due": store_amount(self.balance_due),
            "status": self.status,
        }

    def fulfillment_fields(self) -> dict:
        """The fields a shop / receiving write touches."""
        return {
            "shop_status": self.shop_status,
            "distributor": self.distributor,
            "line_items": [item.to_dict() for item in self.line_items],
            "expected_delivery_date": _iso_or_none(self.expected_delivery_date),
            "received_date": _iso_or_none(self.received_date),
            "received_by": self.received_by,
            "ready_for_pick_up_date": _iso_or_none(self.ready_for_pick_up_date),
            "picked_up_date": _iso_or_none(self.picked_up_date),
        }

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "doc_type": self.doc_type.value,
            "document_number": self.document_number,
            "customer_ref": self.customer_ref,
            "date": to_iso(self.date),
            "due_date": _iso_or_none(self.due_date),
            "line_items": [item.to_dict() for item in self.line_items],
            "subtotal": store_amount(self.subtotal),
            "tax_amount": store_amount(self.tax_amount),
            "total": store_amount(self.total),
            "payments": [p.to_dict() for p in self.payments],
            "amount_paid": store_amount(self.amount_paid),
            "balance_due": store_amount(self.balance_due),
            "status": self.status,
            "workflow_status": self.workflow_status,
            "is_finalized": self.is_finalized,
            "notes": self.notes,
            "po_number": self.po_number,
            "source_ref": self.source_ref,
        }
        data.update(self.fulfillment_fields())
        return data

    @classmethod
    def from_dict(cls, data: dict, doc_type: DocumentType | None = None) -> FinancialDocument:
        resolved_type = doc_type or DocumentType(data["doc_type"])
        return cls(
            id=data["id"],
            doc_type=resolved_type,
            document_number=data.get("document_number") or "",
            customer_ref=data.get("customer_ref") or "",
            date=parse_iso(data["date"]),
            due_date=parse_iso(data.get("due_date")),
            line_items=tuple(LineItem.from_dict(i) for i in data.get("line_items") or ()),
            payments=tuple(Payment.from_dict(p) for p in data.get("payments") or ()),
            subtotal=data.get("subtotal", 0),
            tax_amount=data.get("tax_amount", 0),
            total=data.get("total", 0),
            amount_paid=data.get("amount_paid", 0),
            balance_due=data.get("balance_due", 0),
            status=data.get("status") or "Draft",
            workflow_status=data.get("workflow_status"),
            is_finalized=bool(data.get("is_finalized", False)),
            notes=data.get("notes") or "",
            po_number=data.get("po_number") or "",
            source_ref=data.get("source_ref"),
            distributor=data.get("distributor"),
            shop_status=data.get("shop_status"),
            expected_delivery_date=parse_iso(data.get("expected_delivery_date")),
            received_date=parse_iso(data.get("received_date")),
            received_by=data.get("received_by"),
            ready_for_pick_up_date=parse_iso(data.get("ready_for_pick_up_date")),
            picked_up_date=parse_iso(data.get("picked_up_date")),
        )


def _iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else to_iso(value)
