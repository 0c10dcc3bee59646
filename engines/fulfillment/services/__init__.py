"""Yardbook Fulfillment Engine - application service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from core.commands.rejection import raise_first_rejection
from core.config import LedgerRules
from core.context import ActorContext, IdentityProvider
from core.document_store import DocumentStore
from core.primitives.document import DocumentType, FinancialDocument
from core.time import Clock, get_default_clock
from engines.catalog.events import receipt_key
from engines.catalog.services import CatalogService
from engines.fulfillment.commands import (
    SHOP_DOCUMENT_TYPES,
    AttachVendorRequest,
    ReceiveItemsRequest,
    ShopTransitionRequest,
)
from engines.fulfillment.machine import (
    FulfillmentSummary,
    attach_vendor,
    fulfillment_summary,
    needs_pickup_reminder,
    reconcile_receipt,
    transition,
)
from engines.invoicing.policies import document_must_exist_policy

logger = logging.getLogger("yardbook.fulfillment")


class FulfillmentService:
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

    def _actor(self, actor: ActorContext | None) -> Optional[ActorContext]:
        if actor is not None:
            return actor
        return None if self._identity is None else self._identity.current_actor()

    def _load(self, doc_type: DocumentType, doc_id: str) -> FinancialDocument:
        data = self._store.get(doc_type.collection, doc_id)
        doc = None if data is None else FinancialDocument.from_dict(data, doc_type)
        raise_first_rejection([document_must_exist_policy(doc, doc_id)])
        return doc

    def _write(self, doc: FinancialDocument) -> None:
        self._store.put(doc.collection, doc.id, doc.fulfillment_fields(), merge=True)

    # ── operations ───────────────────────────────────────────

    def attach_vendor(self, request: AttachVendorRequest) -> FinancialDocument:
        doc = self._load(request.doc_type, request.doc_id)
        updated = attach_vendor(doc, request.vendor_ref, request.expected_delivery_date)
        self._write(updated)
        logger.info("%s %s vendor %s attached", doc.doc_type.value.lower(), doc.id, request.vendor_ref)
        return updated

    def update_shop_status(
        self,
        request: ShopTransitionRequest,
        *,
        actor: ActorContext | None = None,
    ) -> FinancialDocument:
        doc = self._load(request.doc_type, request.doc_id)
        updated = transition(doc, request.new_status, self._clock.now_utc(), self._actor(actor))
        self._write(updated)
        logger.info("%s %s shop status -> %s", doc.doc_type.value.lower(), doc.id, updated.shop_status)
        return updated

    def record_receipt(
        self,
        request: ReceiveItemsRequest,
        *,
        actor: ActorContext | None = None,
    ) -> FinancialDocument:
        """
        Save received quantities, then bring catalog stock in line with
        them line by line. Each product remembers what it has taken in
        for a line, so saving the same quantities again moves stock by
        zero and a retry after a failed stock write finishes the move.
        """
        doc = self._load(request.doc_type, request.doc_id)
        updated = reconcile_receipt(
            doc,
            request.received_quantities,
            self._clock.now_utc(),
            self._actor(actor),
            self._rules,
        )
        self._write(updated)

        for item in updated.line_items:
            if item.product_ref:
                self._catalog.apply_receipt(
                    item.product_ref,
                    receipt_key(updated.collection, updated.id, item.id),
                    item.received_quantity,
                )

        logger.info(
            "%s %s receipt saved, shop status %s",
            doc.doc_type.value.lower(),
            doc.id,
            updated.shop_status,
        )
        return updated

    # ── shop board ───────────────────────────────────────────

    def shop_items(self) -> List[FinancialDocument]:
        """Orders and invoices that have a vendor attached."""
        items = []
        for doc_type in sorted(SHOP_DOCUMENT_TYPES, key=lambda t: t.value):
            for row in self._store.query(doc_type.collection):
                doc = FinancialDocument.from_dict(row, doc_type)
                if doc.has_fulfillment_view:
                    items.append(doc)
        return items

    def pickup_reminders(self, now: datetime | None = None) -> List[FinancialDocument]:
        now = now or self._clock.now_utc()
        return [doc for doc in self.shop_items() if needs_pickup_reminder(doc, now, self._rules)]

    def summary(self, now: datetime | None = None) -> FulfillmentSummary:
        return fulfillment_summary(self.shop_items(), now or self._clock.now_utc(), self._rules)
