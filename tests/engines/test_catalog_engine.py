"""Yardbook Catalog Engine tests: customer pricing, products and price history."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)


def post(**overrides):
    from core.primitives import Product

    values = dict(id="p-post", name="8' line post", price="24.00", cost="16.00", category="Posts")
    values.update(overrides)
    return Product(**values)


class TestPricing:
    def test_specific_rule_beats_wildcard(self):
        from core.primitives import MarkupRule
        from engines.catalog.pricing import select_markup_rule

        rules = [MarkupRule("All Categories", 20), MarkupRule("Posts", 35)]
        assert select_markup_rule("Posts", rules).markup_percent == 35
        assert select_markup_rule("Fabric", rules).is_wildcard
        assert select_markup_rule("Fabric", [MarkupRule("Posts", 35)]) is None

    def test_markup_on_cost(self):
        from core.primitives import MarkupRule
        from engines.catalog.pricing import price_for_customer

        assert price_for_customer(post(), [MarkupRule("Posts", "12.5")]) == Decimal("18.00")

    def test_list_price_without_rule(self):
        from engines.catalog.pricing import price_for_customer

        assert price_for_customer(post()) == Decimal("24.00")


class TestCatalogService:
    def _svc(self):
        from core.document_store import InMemoryDocumentStore
        from core.time import FixedClock
        from engines.catalog.services import CatalogService

        store = InMemoryDocumentStore()
        clock = FixedClock(NOW)
        return CatalogService(store=store, clock=clock), store, clock

    def test_create_with_id(self):
        svc, store, _ = self._svc()
        created = svc.create_product(post())
        assert created.created_at == NOW
        assert store.get("products", "p-post")["name"] == "8' line post"

    def test_create_without_id_assigns_one(self):
        svc, store, _ = self._svc()
        created = svc.create_product(post(id=""))
        assert created.id
        assert svc.get_product(created.id).price == Decimal("24.00")

    def test_creation_records_history(self):
        from core.context import ActorContext

        svc, _, _ = self._svc()
        svc.create_product(
            post(),
            actor=ActorContext(actor_type="SYSTEM", actor_id="importer"),
            reason="Initial load",
        )
        (entry,) = svc.price_history("p-post")
        assert entry["new_price"] == 24.0
        assert entry["changed_by"] == "importer"
        assert entry["reason"] == "Initial load"
        assert "old_cost" not in entry

    def test_update_records_only_price_changes(self):
        svc, _, clock = self._svc()
        svc.create_product(post())
        clock.advance(days=1)
        svc.update_product(post(name="8ft line post"))
        assert len(svc.price_history("p-post")) == 1

        clock.advance(days=1)
        svc.update_product(post(cost="17.50"))
        latest = svc.price_history("p-post")[0]
        assert latest["old_cost"] == 16.0
        assert latest["new_cost"] == 17.5

    def test_price_history_limit(self):
        svc, _, clock = self._svc()
        svc.create_product(post())
        for cents in range(1, 4):
            clock.advance(days=1)
            svc.update_product(post(price=Decimal("24.00") + Decimal(cents) / 100))
        history = svc.price_history("p-post", limit=2)
        assert [entry["new_price"] for entry in history] == [24.03, 24.02]

    def test_update_missing_product(self):
        from core.document_store import DocumentNotFound

        svc, _, _ = self._svc()
        with pytest.raises(DocumentNotFound):
            svc.update_product(post())

    def test_adjust_stock(self):
        svc, store, _ = self._svc()
        svc.create_product(post(quantity_in_stock=3))
        assert svc.adjust_stock("p-post", "2.5").quantity_in_stock == Decimal("5.5")
        assert store.get("products", "p-post")["quantity_in_stock"] == 5.5

    def test_adjust_stock_unknown_product(self):
        svc, store, _ = self._svc()
        assert svc.adjust_stock("ghost", 1) is None
        assert store.write_log == []

    def test_apply_receipt_moves_outstanding_difference(self):
        svc, store, _ = self._svc()
        svc.create_product(post(quantity_in_stock=3))
        key = "orders/ord-1/L1"

        assert svc.apply_receipt("p-post", key, 6).quantity_in_stock == Decimal(9)
        assert svc.apply_receipt("p-post", key, 6).quantity_in_stock == Decimal(9)
        assert svc.apply_receipt("p-post", key, 4).quantity_in_stock == Decimal(7)
        assert store.get("products", "p-post")["receipt_marks"] == {key: 4.0}

        svc.apply_receipt("p-post", key, 0)
        stored = store.get("products", "p-post")
        assert stored["quantity_in_stock"] == 3.0
        assert stored["receipt_marks"] == {}

    def test_update_product_keeps_receipt_marks(self):
        svc, store, _ = self._svc()
        svc.create_product(post())
        svc.apply_receipt("p-post", "orders/ord-1/L1", 2)
        svc.update_product(post(price=Decimal("25.00"), quantity_in_stock=2))
        assert store.get("products", "p-post")["receipt_marks"] == {"orders/ord-1/L1": 2.0}


class TestPromotion:
    def test_unnamed_item_gets_placeholder_name(self):
        from core.document_store import InMemoryDocumentStore
        from core.primitives import LineItem
        from core.time import FixedClock
        from engines.catalog.services import CatalogService

        svc = CatalogService(store=InMemoryDocumentStore(), clock=FixedClock(NOW))
        item = LineItem(
            id="L1", name="", quantity=2, unit_price="9.99",
            is_non_stock=True, add_to_product_list=True,
        )
        result = svc.promote_non_stock_items([item])
        (product,) = result.created_products
        assert product.name == "Unnamed Product"
        assert product.category == "Uncategorized"
        assert product.unit == "unit"
        assert result.line_items[0].product_ref == product.id
