"""
Yardbook Document Store — Public API
=====================================
Protocol, errors and the in-memory implementation.

The Django-backed store lives in core.document_store.repository and
is imported explicitly once Django is configured.
"""

from core.document_store.errors import DocumentNotFound, StoreError
from core.document_store.memory import InMemoryDocumentStore
from core.document_store.protocol import (
    FILTER_OPERATORS,
    DocumentStore,
    Filter,
    normalize_filters,
    sort_documents,
)

__all__ = [
    "DocumentNotFound",
    "DocumentStore",
    "FILTER_OPERATORS",
    "Filter",
    "InMemoryDocumentStore",
    "StoreError",
    "normalize_filters",
    "sort_documents",
]
