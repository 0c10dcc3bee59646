"""
Yardbook Core Primitives — Shared Business Building Blocks
===========================================================
Primitives are the engine-agnostic data shapes every engine consumes:

- Pure Python (no Django dependency)
- Immutable (frozen dataclasses)
- Money held as Decimal, stored as cent-rounded numbers

Primitives:
    document  — Estimate / Order / Invoice, line items, payments
    party     — Customer with credit balance and markup rules
    item      — Catalog product
"""

from core.primitives.document import (
    DOCUMENT_COLLECTIONS,
    PAYMENT_METHODS,
    DocumentType,
    FinancialDocument,
    LineItem,
    Payment,
)
from core.primitives.item import DEFAULT_CATEGORY, DEFAULT_UNIT, Product
from core.primitives.party import ALL_CATEGORIES, Customer, MarkupRule

__all__ = [
    "DOCUMENT_COLLECTIONS",
    "PAYMENT_METHODS",
    "DocumentType",
    "FinancialDocument",
    "LineItem",
    "Payment",
    "DEFAULT_CATEGORY",
    "DEFAULT_UNIT",
    "Product",
    "ALL_CATEGORIES",
    "Customer",
    "MarkupRule",
]
