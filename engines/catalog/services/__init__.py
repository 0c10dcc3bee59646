"""Yardbook Catalog Engine - application service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from core.context import ActorContext, actor_label
from core.document_store import DocumentNotFound, DocumentStore
from core.money import to_decimal
from core.primitives.document import LineItem
from core.primitives.item import DEFAULT_CATEGORY, DEFAULT_UNIT, Product
from core.time import Clock, get_default_clock
from engines.catalog.events import (
    PRICE_HISTORY_COLLECTION,
    PRODUCTS_COLLECTION,
    PROMOTION_REASON,
    RECEIPT_MARKS_FIELD,
    build_price_history_entry,
    price_fields_changed,
    promoted_product_id,
)

logger = logging.getLogger("yardbook.catalog")

UNNAMED_PRODUCT = "Unnamed Product"


@dataclass(frozen=True)
class PromotionResult:
    line_items: Tuple[LineItem, ...]
    created_products: Tuple[Product, ...]


class CatalogService:
    def __init__(self, *, store: DocumentStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or get_default_clock()

    # ── products ─────────────────────────────────────────────

    def get_product(self, product_id: str) -> Optional[Product]:
        data = self._store.get(PRODUCTS_COLLECTION, product_id)
        return None if data is None else Product.from_dict(data)

    def create_product(
        self,
        product: Product,
        *,
        actor: ActorContext | None = None,
        reason: Optional[str] = None,
    ) -> Product:
        stamped = replace(product, created_at=product.created_at or self._clock.now_utc())
        fields = stamped.to_dict()
        fields.pop("id", None)
        if stamped.id:
            self._store.put(PRODUCTS_COLLECTION, stamped.id, fields, merge=False)
            created = stamped
        else:
            created = replace(stamped, id=self._store.add(PRODUCTS_COLLECTION, fields))
        logger.info("product created id=%s name=%s", created.id, created.name)
        self.record_price_change(None, created, actor=actor, reason=reason)
        return created

    def update_product(
        self,
        product: Product,
        *,
        actor: ActorContext | None = None,
        reason: Optional[str] = None,
    ) -> Product:
        previous = self.get_product(product.id)
        if previous is None:
            raise DocumentNotFound(PRODUCTS_COLLECTION, product.id)
        fields = product.to_dict()
        fields.pop("id", None)
        self._store.put(PRODUCTS_COLLECTION, product.id, fields, merge=True)
        self.record_price_change(previous, product, actor=actor, reason=reason)
        return product

    def adjust_stock(self, product_id: str, delta) -> Optional[Product]:
        """Move quantity_in_stock by delta. Unknown products are skipped."""
        delta = to_decimal(delta)
        product = self.get_product(product_id)
        if product is None:
            logger.warning("stock adjustment skipped, product %s not found", product_id)
            return None
        if delta == 0:
            return product
        updated = replace(product, quantity_in_stock=product.quantity_in_stock + delta)
        self._store.put(
            PRODUCTS_COLLECTION,
            product_id,
            {"quantity_in_stock": float(updated.quantity_in_stock)},
            merge=True,
        )
        logger.info("stock %s %+f -> %s", product_id, float(delta), updated.quantity_in_stock)
        return updated

    def apply_receipt(self, product_id: str, key: str, received) -> Optional[Product]:
        """
        Bring stock in line with the quantity received on one document line.

        The product keeps the quantity it has already taken in under key
        and moves stock and that mark in a single write, so repeating a
        receipt, or retrying one whose earlier attempt failed, moves
        stock by exactly the outstanding difference.
        """
        received = to_decimal(received)
        data = self._store.get(PRODUCTS_COLLECTION, product_id)
        if data is None:
            logger.warning("stock adjustment skipped, product %s not found", product_id)
            return None
        product = Product.from_dict(data)
        marks = dict(data.get(RECEIPT_MARKS_FIELD) or {})
        delta = received - to_decimal(marks.get(key))
        if delta == 0:
            return product
        if received == 0:
            marks.pop(key, None)
        else:
            marks[key] = float(received)
        updated = replace(product, quantity_in_stock=product.quantity_in_stock + delta)
        self._store.put(
            PRODUCTS_COLLECTION,
            product_id,
            {
                "quantity_in_stock": float(updated.quantity_in_stock),
                RECEIPT_MARKS_FIELD: marks,
            },
            merge=True,
        )
        logger.info(
            "stock %s %+f -> %s (receipt %s)",
            product_id,
            float(delta),
            updated.quantity_in_stock,
            key,
        )
        return updated

    # ── price history ────────────────────────────────────────

    def record_price_change(
        self,
        old: Optional[Product],
        new: Product,
        *,
        actor: ActorContext | None = None,
        reason: Optional[str] = None,
    ) -> Optional[str]:
        """Append a price history entry when price, cost or markup moved."""
        if not price_fields_changed(old, new):
            return None
        entry = build_price_history_entry(
            old,
            new,
            timestamp=self._clock.now_utc(),
            changed_by=None if actor is None else actor_label(actor),
            reason=reason,
        )
        return self._store.add(PRICE_HISTORY_COLLECTION, entry)

    def price_history(self, product_id: str, limit: int = 50) -> List[dict]:
        entries = self._store.query(
            PRICE_HISTORY_COLLECTION,
            [("product_id", "==", product_id)],
            order_by="-timestamp",
        )
        return entries[:limit]

    # ── non-stock promotion ──────────────────────────────────

    def promote_non_stock_items(
        self,
        items: Sequence[LineItem],
        *,
        actor: ActorContext | None = None,
        collection: Optional[str] = None,
        doc_id: Optional[str] = None,
    ) -> PromotionResult:
        """
        Create a catalog product for every non-stock item flagged
        add_to_product_list, and point the item at it.

        Products are created before the caller writes the parent
        document, so the document never holds a placeholder reference.
        A failed product write propagates and the parent is not saved.

        With collection and doc_id the product id is derived from the
        owning document line. A product left behind by a save whose
        parent write failed is then reused on retry instead of
        duplicated.
        """
        promoted: List[LineItem] = []
        created: List[Product] = []
        for item in items:
            if not (item.is_non_stock and item.add_to_product_list):
                promoted.append(item)
                continue
            product_id = ""
            if collection and doc_id:
                product_id = promoted_product_id(collection, doc_id, item.id)
            product = self.get_product(product_id) if product_id else None
            if product is None:
                product = self.create_product(
                    Product(
                        id=product_id,
                        name=item.name or UNNAMED_PRODUCT,
                        category=item.category or DEFAULT_CATEGORY,
                        unit=item.unit or DEFAULT_UNIT,
                        price=item.unit_price,
                        cost=item.cost or Decimal(0),
                        markup_percent=item.markup_percent or Decimal(0),
                        quantity_in_stock=Decimal(0),
                    ),
                    actor=actor,
                    reason=PROMOTION_REASON,
                )
                created.append(product)
            else:
                logger.info("reusing product %s promoted by an earlier save", product.id)
            promoted.append(
                replace(
                    item,
                    product_ref=product.id,
                    is_non_stock=False,
                    add_to_product_list=False,
                )
            )
        if created:
            logger.info("promoted %d non-stock item(s) to the catalog", len(created))
        return PromotionResult(line_items=tuple(promoted), created_products=tuple(created))
