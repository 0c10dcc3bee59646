"""
Yardbook Invoicing Engine - application service.

Every save recomputes the derived fields from their inputs before the
write, so amount_paid, balance_due and status are never persisted out
of step with line items and payments. Store failures propagate; the
recomputed document is only returned once the write has landed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from core.commands.rejection import raise_first_rejection
from core.config import LedgerRules
from core.context import ActorContext, IdentityProvider
from core.document_store import DocumentStore
from core.primitives.document import DocumentType, FinancialDocument
from core.primitives.item import Product
from core.time import Clock, get_default_clock
from engines.catalog.services import CatalogService
from engines.invoicing.commands import ConvertEstimateRequest, SetWorkflowStatusRequest
from engines.invoicing.policies import (
    document_must_exist_policy,
    document_must_not_be_finalized_policy,
    workflow_status_must_be_valid_policy,
)
from engines.invoicing.recalculate import recalculate, resolve_workflow_status
from engines.invoicing.status import ORDERED, workflow_from_status

logger = logging.getLogger("yardbook.documents")


@dataclass(frozen=True)
class SaveResult:
    document: FinancialDocument
    created_products: Tuple[Product, ...] = ()


class DocumentService:
    def __init__(
        self,
        *,
        store: DocumentStore,
        catalog: CatalogService | None = None,
        clock: Clock | None = None,
        identity: IdentityProvider | None = None,
        rules: LedgerRules | None = None,
    ):
        self._store = store
        self._clock = clock or get_default_clock()
        self._catalog = catalog or CatalogService(store=store, clock=self._clock)
        self._identity = identity
        self._rules = rules or LedgerRules.from_settings()

    def _current_actor(self) -> Optional[ActorContext]:
        return None if self._identity is None else self._identity.current_actor()

    # ── reads ────────────────────────────────────────────────

    def get_document(self, doc_type: DocumentType, doc_id: str) -> Optional[FinancialDocument]:
        data = self._store.get(doc_type.collection, doc_id)
        return None if data is None else FinancialDocument.from_dict(data, doc_type)

    def require_document(self, doc_type: DocumentType, doc_id: str) -> FinancialDocument:
        doc = self.get_document(doc_type, doc_id)
        raise_first_rejection([document_must_exist_policy(doc, doc_id)])
        return doc

    # ── writes ───────────────────────────────────────────────

    def save_document(
        self,
        doc: FinancialDocument,
        *,
        actor: ActorContext | None = None,
    ) -> SaveResult:
        stored = self.get_document(doc.doc_type, doc.id)
        raise_first_rejection([
            document_must_not_be_finalized_policy(stored),
            workflow_status_must_be_valid_policy(doc.doc_type, resolve_workflow_status(doc)),
        ])

        promotion = self._catalog.promote_non_stock_items(
            doc.line_items,
            actor=actor or self._current_actor(),
            collection=doc.collection,
            doc_id=doc.id,
        )
        derived = recalculate(replace(doc, line_items=promotion.line_items), self._rules)

        fields = derived.to_dict()
        fields.pop("id")
        self._store.put(derived.collection, derived.id, fields, merge=True)
        logger.info(
            "%s %s saved total=%s paid=%s balance=%s status=%s",
            derived.doc_type.value.lower(),
            derived.document_number,
            derived.total,
            derived.amount_paid,
            derived.balance_due,
            derived.status,
        )
        return SaveResult(document=derived, created_products=promotion.created_products)

    def set_workflow_status(self, request: SetWorkflowStatusRequest) -> FinancialDocument:
        doc = self.require_document(request.doc_type, request.doc_id)
        raise_first_rejection([
            document_must_not_be_finalized_policy(doc),
            workflow_status_must_be_valid_policy(doc.doc_type, request.status),
        ])
        # A payment status picked by hand keeps the previous workflow axis.
        workflow = workflow_from_status(request.status) or resolve_workflow_status(doc)
        derived = recalculate(replace(doc, workflow_status=workflow), self._rules)
        self._store.put(
            derived.collection,
            derived.id,
            {"workflow_status": derived.workflow_status, "status": derived.status},
            merge=True,
        )
        logger.info("%s %s status -> %s", derived.doc_type.value.lower(), derived.id, derived.status)
        return derived

    def finalize(self, doc_type: DocumentType, doc_id: str) -> FinancialDocument:
        return self._set_finalized(doc_type, doc_id, True)

    def unfinalize(self, doc_type: DocumentType, doc_id: str) -> FinancialDocument:
        return self._set_finalized(doc_type, doc_id, False)

    def _set_finalized(self, doc_type: DocumentType, doc_id: str, value: bool) -> FinancialDocument:
        doc = self.require_document(doc_type, doc_id)
        if doc.is_finalized == value:
            return doc
        self._store.put(doc_type.collection, doc_id, {"is_finalized": value}, merge=True)
        logger.info("%s %s finalized=%s", doc_type.value.lower(), doc_id, value)
        return replace(doc, is_finalized=value)

    def convert_estimate_to_order(
        self,
        request: ConvertEstimateRequest,
        *,
        actor: ActorContext | None = None,
    ) -> SaveResult:
        estimate = self.require_document(DocumentType.ESTIMATE, request.estimate_id)
        notes = f"Converted from Estimate #{estimate.document_number}. {estimate.notes}".strip()
        order = FinancialDocument(
            id=request.order_id or uuid.uuid4().hex,
            doc_type=DocumentType.ORDER,
            document_number=request.order_number,
            customer_ref=estimate.customer_ref,
            date=self._clock.now_utc(),
            line_items=tuple(
                replace(item, received_quantity=Decimal(0)) for item in estimate.line_items
            ),
            workflow_status=ORDERED,
            status=ORDERED,
            notes=notes,
            po_number=estimate.po_number,
            source_ref=estimate.id,
        )
        result = self.save_document(order, actor=actor)
        logger.info(
            "estimate %s converted to order %s",
            estimate.document_number,
            result.document.document_number,
        )
        return result
