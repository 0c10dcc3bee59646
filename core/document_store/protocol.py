"""
Yardbook Document Store - Collaborator Protocol
===============================================
The narrow interface the engines use to reach persistence.

    get(collection, doc_id)                 -> dict | None
    put(collection, doc_id, fields, merge)  -> None   (raises StoreError)
    add(collection, fields)                 -> new doc_id
    query(collection, filters, order_by)    -> list[dict]

Documents are plain JSON-compatible dicts. Every returned dict carries
its id under "id". No assumption beyond eventual persistence and
per-document atomicity: there is NO cross-document transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

FILTER_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "in", "not-in"})


@dataclass(frozen=True)
class Filter:
    """One where-clause: field op value."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if not self.field or not isinstance(self.field, str):
            raise ValueError("field must be a non-empty string.")
        if self.op not in FILTER_OPERATORS:
            raise ValueError(
                f"op '{self.op}' not valid. "
                f"Must be one of: {sorted(FILTER_OPERATORS)}"
            )
        if self.op in ("in", "not-in") and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError(f"'{self.op}' filter needs a collection value.")

    def matches(self, document: dict) -> bool:
        if self.field not in document:
            return self.op in ("!=", "not-in")
        actual = document[self.field]
        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        if self.op == "not-in":
            return actual not in self.value
        if actual is None or self.value is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            return False


FilterLike = Filter | Tuple[str, str, Any]
OrderBy = str | Callable[[dict], Any] | None


def normalize_filters(filters: Iterable[FilterLike] | None) -> Tuple[Filter, ...]:
    result: List[Filter] = []
    for item in filters or ():
        result.append(item if isinstance(item, Filter) else Filter(*item))
    return tuple(result)


def sort_documents(documents: List[dict], order_by: OrderBy) -> List[dict]:
    """
    Sort by a field name ("-field" for descending) or a key callable.
    Documents missing the field sort last. The sort is stable.
    """
    if order_by is None:
        return documents
    if callable(order_by):
        return sorted(documents, key=order_by)

    descending = order_by.startswith("-")
    field_name = order_by.lstrip("-")
    present = [d for d in documents if d.get(field_name) is not None]
    missing = [d for d in documents if d.get(field_name) is None]
    present.sort(key=lambda d: d[field_name], reverse=descending)
    return present + missing


class DocumentStore(Protocol):
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...  # pragma: no cover

    def put(self, collection: str, doc_id: str, fields: dict, merge: bool = True) -> None:
        ...  # pragma: no cover

    def add(self, collection: str, fields: dict) -> str:
        ...  # pragma: no cover

    def query(
        self,
        collection: str,
        filters: Sequence[FilterLike] = (),
        order_by: OrderBy = None,
    ) -> List[dict]:
        ...  # pragma: no cover
