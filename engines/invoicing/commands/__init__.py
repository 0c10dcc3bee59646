"""Yardbook Invoicing Engine - request commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.primitives.document import DocumentType


@dataclass(frozen=True)
class SetWorkflowStatusRequest:
    """Operator sets the workflow axis (Sent, Packed, Voided, ...)."""

    doc_type: DocumentType
    doc_id: str
    status: str

    def __post_init__(self):
        if not isinstance(self.doc_type, DocumentType):
            raise ValueError("doc_type must be DocumentType enum.")
        if not self.doc_id:
            raise ValueError("doc_id must be non-empty.")
        if not self.status:
            raise ValueError("status must be non-empty.")


@dataclass(frozen=True)
class ConvertEstimateRequest:
    estimate_id: str
    order_number: str
    order_id: Optional[str] = None

    def __post_init__(self):
        if not self.estimate_id:
            raise ValueError("estimate_id must be non-empty.")
        if not self.order_number:
            raise ValueError("order_number must be non-empty.")
