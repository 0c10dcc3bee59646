"""
Yardbook Document Store - Errors
================================
Store failures are transient and retryable. They always propagate
to the caller; the engines never swallow them.
"""

from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """A read or write against the document store failed."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        collection: str = "",
        doc_id: Optional[str] = None,
    ):
        self.operation = operation
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(message)


class DocumentNotFound(LookupError):
    """A document the operation depends on does not exist."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"No document '{doc_id}' in collection '{collection}'.")
