"""Yardbook Fulfillment Engine - request commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from core.primitives.document import DocumentType

SHOP_DOCUMENT_TYPES = frozenset({DocumentType.ORDER, DocumentType.INVOICE})


def _check_doc(doc_type: DocumentType, doc_id: str) -> None:
    if doc_type not in SHOP_DOCUMENT_TYPES:
        raise ValueError("Only orders and invoices have a fulfillment view.")
    if not doc_id:
        raise ValueError("doc_id must be non-empty.")


@dataclass(frozen=True)
class AttachVendorRequest:
    doc_type: DocumentType
    doc_id: str
    vendor_ref: str
    expected_delivery_date: Optional[datetime] = None

    def __post_init__(self):
        _check_doc(self.doc_type, self.doc_id)
        if not self.vendor_ref:
            raise ValueError("vendor_ref must be non-empty.")


@dataclass(frozen=True)
class ShopTransitionRequest:
    doc_type: DocumentType
    doc_id: str
    new_status: str

    def __post_init__(self):
        _check_doc(self.doc_type, self.doc_id)


@dataclass(frozen=True)
class ReceiveItemsRequest:
    """Received quantity per line item id."""

    doc_type: DocumentType
    doc_id: str
    received_quantities: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        _check_doc(self.doc_type, self.doc_id)
        if not isinstance(self.received_quantities, dict):
            object.__setattr__(self, "received_quantities", dict(self.received_quantities))
