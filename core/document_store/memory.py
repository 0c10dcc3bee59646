"""
Yardbook Document Store - In-Memory Implementation
==================================================
Used by tests and bootstrap scripts. Snapshot semantics: every read
returns a deep copy, so callers cannot mutate stored state in place.

Failure injection:
    store.inject_failure("put", "invoices", "inv-2")
makes the next matching put raise StoreError, which is how the test
suite exercises partially-applied bulk payments.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.document_store.errors import StoreError
from core.document_store.protocol import (
    FilterLike,
    OrderBy,
    normalize_filters,
    sort_documents,
)

logger = logging.getLogger("yardbook.store")


@dataclass
class _InjectedFailure:
    operation: str
    collection: str
    doc_id: Optional[str]
    remaining: int

    def matches(self, operation: str, collection: str, doc_id: Optional[str]) -> bool:
        if self.remaining <= 0:
            return False
        if self.operation != operation or self.collection != collection:
            return False
        return self.doc_id is None or self.doc_id == doc_id


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._failures: List[_InjectedFailure] = []
        self.write_log: List[tuple] = []

    # ── failure injection ────────────────────────────────────

    def inject_failure(
        self,
        operation: str,
        collection: str,
        doc_id: Optional[str] = None,
        times: int = 1,
    ) -> None:
        self._failures.append(_InjectedFailure(operation, collection, doc_id, times))

    def clear_failures(self) -> None:
        self._failures.clear()

    def _maybe_fail(self, operation: str, collection: str, doc_id: Optional[str]) -> None:
        for failure in self._failures:
            if failure.matches(operation, collection, doc_id):
                failure.remaining -= 1
                raise StoreError(
                    f"Injected {operation} failure on {collection}/{doc_id}",
                    operation=operation,
                    collection=collection,
                    doc_id=doc_id,
                )

    # ── protocol ─────────────────────────────────────────────

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        self._maybe_fail("get", collection, doc_id)
        stored = self._collections.get(collection, {}).get(doc_id)
        if stored is None:
            return None
        result = copy.deepcopy(stored)
        result["id"] = doc_id
        return result

    def put(self, collection: str, doc_id: str, fields: dict, merge: bool = True) -> None:
        self._maybe_fail("put", collection, doc_id)
        data = copy.deepcopy(fields)
        data.pop("id", None)
        bucket = self._collections.setdefault(collection, {})
        if merge and doc_id in bucket:
            bucket[doc_id].update(data)
        else:
            bucket[doc_id] = data
        self.write_log.append(("put", collection, doc_id))
        logger.debug("put %s/%s merge=%s", collection, doc_id, merge)

    def add(self, collection: str, fields: dict) -> str:
        self._maybe_fail("add", collection, None)
        doc_id = uuid.uuid4().hex
        data = copy.deepcopy(fields)
        data.pop("id", None)
        self._collections.setdefault(collection, {})[doc_id] = data
        self.write_log.append(("add", collection, doc_id))
        return doc_id

    def query(
        self,
        collection: str,
        filters: Sequence[FilterLike] = (),
        order_by: OrderBy = None,
    ) -> List[dict]:
        self._maybe_fail("query", collection, None)
        clauses = normalize_filters(filters)
        results = []
        for doc_id, stored in self._collections.get(collection, {}).items():
            if all(clause.matches(stored) for clause in clauses):
                document = copy.deepcopy(stored)
                document["id"] = doc_id
                results.append(document)
        return sort_documents(results, order_by)

    # ── test helpers ─────────────────────────────────────────

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))
