"""
Yardbook Document Store - Django Repository
===========================================
DocumentStore implementation over the StoredDocument model.

Equality filters are pushed into the database as JSON key lookups;
range and membership filters are evaluated on the fetched rows with
the same semantics as the in-memory store.

Every DatabaseError is re-raised as StoreError. There is no retry here;
retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Sequence

from django.db import DatabaseError, transaction

from core.document_store.errors import StoreError
from core.document_store.models import StoredDocument
from core.document_store.protocol import (
    FilterLike,
    OrderBy,
    normalize_filters,
    sort_documents,
)

logger = logging.getLogger("yardbook.store")


def _with_id(row: StoredDocument) -> dict:
    document = dict(row.data)
    document["id"] = row.doc_id
    return document


class DjangoDocumentStore:
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            row = StoredDocument.objects.filter(
                collection=collection, doc_id=doc_id,
            ).first()
        except DatabaseError as exc:
            raise StoreError(
                f"Read failed for {collection}/{doc_id}: {exc}",
                operation="get", collection=collection, doc_id=doc_id,
            ) from exc
        return None if row is None else _with_id(row)

    def put(self, collection: str, doc_id: str, fields: dict, merge: bool = True) -> None:
        data = {k: v for k, v in fields.items() if k != "id"}
        try:
            with transaction.atomic():
                row = (
                    StoredDocument.objects.select_for_update()
                    .filter(collection=collection, doc_id=doc_id)
                    .first()
                )
                if row is None:
                    StoredDocument.objects.create(
                        collection=collection, doc_id=doc_id, data=data,
                    )
                else:
                    row.data = {**row.data, **data} if merge else data
                    row.save(update_fields=["data", "updated_at"])
        except DatabaseError as exc:
            raise StoreError(
                f"Write failed for {collection}/{doc_id}: {exc}",
                operation="put", collection=collection, doc_id=doc_id,
            ) from exc
        logger.debug("put %s/%s merge=%s", collection, doc_id, merge)

    def add(self, collection: str, fields: dict) -> str:
        doc_id = uuid.uuid4().hex
        self.put(collection, doc_id, fields, merge=False)
        return doc_id

    def query(
        self,
        collection: str,
        filters: Sequence[FilterLike] = (),
        order_by: OrderBy = None,
    ) -> List[dict]:
        clauses = normalize_filters(filters)
        equality = {
            f"data__{clause.field}": clause.value
            for clause in clauses
            if clause.op == "==" and clause.value is not None
        }
        remaining = [
            clause for clause in clauses
            if not (clause.op == "==" and clause.value is not None)
        ]
        try:
            rows = list(
                StoredDocument.objects.filter(collection=collection, **equality)
            )
        except DatabaseError as exc:
            raise StoreError(
                f"Query failed for {collection}: {exc}",
                operation="query", collection=collection,
            ) from exc

        documents = [_with_id(row) for row in rows]
        documents = [
            document for document in documents
            if all(clause.matches(document) for clause in remaining)
        ]
        return sort_documents(documents, order_by)
