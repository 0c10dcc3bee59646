"""Yardbook Invoicing Engine tests: totals, status derivation, document saves."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)


def item(line_id="L1", quantity=2, unit_price="50.00", **extra):
    from core.primitives import LineItem

    return LineItem(id=line_id, name=f"Item {line_id}", quantity=quantity, unit_price=unit_price, **extra)


def payment(amount, **extra):
    from core.primitives import Payment

    return Payment(amount=amount, date=NOW, method="Cash", **extra)


def invoice(doc_id="inv-1", **overrides):
    from core.primitives import DocumentType, FinancialDocument

    values = dict(
        id=doc_id,
        doc_type=DocumentType.INVOICE,
        document_number="1001",
        customer_ref="c1",
        date=NOW,
        line_items=(item(),),
    )
    values.update(overrides)
    return FinancialDocument(**values)


# ══════════════════════════════════════════════════════════════
# TOTALS
# ══════════════════════════════════════════════════════════════

class TestTotals:
    def test_line_total_rounds_half_up(self):
        from engines.invoicing.totals import line_total

        assert line_total(item(quantity="1.5", unit_price="0.67")) == Decimal("1.01")

    def test_return_lines_are_negative(self):
        from engines.invoicing.totals import compute_totals, line_total

        refund = item("R1", quantity=1, unit_price="20.00", is_return=True)
        assert line_total(refund) == Decimal("-20.00")
        assert compute_totals([item(), refund]).subtotal == Decimal("80.00")

    def test_recompute_overwrites_stale_line_totals(self):
        from engines.invoicing.totals import recompute_line_items

        (fixed,) = recompute_line_items([item(total="999.99")])
        assert fixed.total == Decimal("100.00")

    def test_total_includes_tax(self):
        from engines.invoicing.totals import compute_totals, tax_for

        assert tax_for(Decimal("100.00"), Decimal("0.0825")) == Decimal("8.25")
        totals = compute_totals([item()], tax_amount="8.25")
        assert totals.total == Decimal("108.25")

    def test_payment_totals(self):
        from engines.invoicing.totals import compute_payment_totals

        paid = compute_payment_totals("100.00", [payment("33.33"), payment("33.33")])
        assert paid.amount_paid == Decimal("66.66")
        assert paid.balance_due == Decimal("33.34")

    def test_idempotent(self):
        from engines.invoicing.totals import compute_totals, recompute_line_items

        once = recompute_line_items([item(), item("L2", quantity="1.5", unit_price="3.33")])
        assert recompute_line_items(once) == once
        assert compute_totals(once) == compute_totals(recompute_line_items(once))


# ══════════════════════════════════════════════════════════════
# STATUS DERIVATION
# ══════════════════════════════════════════════════════════════

class TestDeriveStatus:
    def test_paid_overrides_workflow(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Packed", 100, 100, 0) == "Paid"

    def test_partially_paid_overrides_workflow(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Sent", 100, 40, 60) == "Partially Paid"

    def test_unpaid_keeps_workflow(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Sent", 100, 0, 100) == "Sent"
        assert derive_status(None, 100, 0, 100) == "Draft"

    def test_zero_total_is_paid(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Draft", 0, 0, 0) == "Paid"

    def test_voided_wins_over_paid(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Voided", 100, 100, 0) == "Voided"

    def test_half_cent_balance_is_paid(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Sent", "100.00", "99.996", "0.004") == "Paid"
        assert derive_status("Sent", "100.00", "99.99", "0.01") == "Partially Paid"

    def test_overpaid_is_paid(self):
        from engines.invoicing.status import derive_status

        assert derive_status("Sent", 100, 120, -20) == "Paid"

    def test_estimates_use_workflow_only(self):
        from core.primitives import DocumentType
        from engines.invoicing.status import status_for_document

        assert status_for_document(DocumentType.ESTIMATE, "Accepted", 0, 0, 0) == "Accepted"
        assert status_for_document(DocumentType.ESTIMATE, None, 50, 0, 50) == "Draft"

    def test_payment_statuses_are_not_workflow(self):
        from engines.invoicing.status import workflow_from_status

        assert workflow_from_status("Paid") is None
        assert workflow_from_status("Partially Paid") is None
        assert workflow_from_status("Packed") == "Packed"

    def test_vocabularies(self):
        from core.primitives import DocumentType
        from engines.invoicing.status import is_valid_status

        assert is_valid_status(DocumentType.INVOICE, "Partial Packed")
        assert is_valid_status(DocumentType.ORDER, "Invoiced")
        assert not is_valid_status(DocumentType.ORDER, "Packed")
        assert not is_valid_status(DocumentType.ESTIMATE, "Paid")


class TestRecalculate:
    def test_untrusted_fields_rewritten(self):
        from engines.invoicing.recalculate import recalculate

        stale = invoice(
            payments=(payment(40),),
            subtotal="1.00",
            total="1.00",
            amount_paid="0.00",
            balance_due="1.00",
            status="Paid",
            workflow_status="Sent",
        )
        doc = recalculate(stale)
        assert doc.total == Decimal("100.00")
        assert doc.amount_paid == Decimal("40.00")
        assert doc.balance_due == Decimal("60.00")
        assert doc.status == "Partially Paid"
        assert doc.workflow_status == "Sent"

    def test_legacy_status_recovered_as_workflow(self):
        from engines.invoicing.recalculate import resolve_workflow_status

        assert resolve_workflow_status(invoice(status="Packed")) == "Packed"
        assert resolve_workflow_status(invoice(status="Paid")) is None

    def test_tax_rate_applied(self):
        from core.config import LedgerRules
        from engines.invoicing.recalculate import recalculate

        doc = recalculate(invoice(), LedgerRules(tax_rate="0.08"))
        assert doc.tax_amount == Decimal("8.00")
        assert doc.total == Decimal("108.00")

    def test_payments_only_trusts_total(self):
        from engines.invoicing.recalculate import recalculate_payments

        doc = recalculate_payments(invoice(total="250.00", payments=(payment(50),)))
        assert doc.balance_due == Decimal("200.00")


# ══════════════════════════════════════════════════════════════
# DOCUMENT SERVICE
# ══════════════════════════════════════════════════════════════

class TestDocumentService:
    def _svc(self, **kwargs):
        from core.document_store import InMemoryDocumentStore
        from core.time import FixedClock
        from engines.invoicing.services import DocumentService

        store = kwargs.pop("store", None) or InMemoryDocumentStore()
        return DocumentService(store=store, clock=FixedClock(NOW), **kwargs), store

    def test_save_persists_derived_fields(self):
        svc, store = self._svc()
        result = svc.save_document(invoice(payments=(payment(40),), workflow_status="Sent"))

        stored = store.get("invoices", "inv-1")
        assert stored["total"] == 100.0
        assert stored["amount_paid"] == 40.0
        assert stored["balance_due"] == 60.0
        assert stored["status"] == "Partially Paid"
        assert result.document.status == "Partially Paid"
        assert result.created_products == ()

    def test_save_then_reload(self):
        from core.primitives import DocumentType

        svc, _ = self._svc()
        saved = svc.save_document(invoice(workflow_status="Sent")).document
        assert svc.require_document(DocumentType.INVOICE, "inv-1") == saved

    def test_sub_cent_price_totals_match_stored_price(self):
        from core.money import round2
        from core.primitives import DocumentType

        svc, store = self._svc()
        svc.save_document(invoice(line_items=(item(quantity=10, unit_price="1.234"),)))

        stored = store.get("invoices", "inv-1")
        line = stored["line_items"][0]
        assert line["unit_price"] == 1.23
        assert round2(line["total"]) == round2(line["quantity"] * round2(line["unit_price"]))
        assert stored["total"] == 12.3

        reloaded = svc.require_document(DocumentType.INVOICE, "inv-1")
        again = svc.save_document(reloaded).document
        assert again.total == Decimal("12.30")

    def test_missing_document_rejected(self):
        from core.commands import CommandRejected
        from core.primitives import DocumentType

        svc, _ = self._svc()
        with pytest.raises(CommandRejected) as info:
            svc.require_document(DocumentType.INVOICE, "nope")
        assert info.value.code == "DOCUMENT_NOT_FOUND"

    def test_invalid_status_rejected_before_write(self):
        from core.commands import CommandRejected

        svc, store = self._svc()
        with pytest.raises(CommandRejected) as info:
            svc.save_document(invoice(workflow_status="Invoiced"))
        assert info.value.code == "INVALID_STATUS"
        assert store.count("invoices") == 0

    def test_finalized_document_rejects_edits(self):
        from core.commands import CommandRejected
        from core.primitives import DocumentType

        svc, store = self._svc()
        svc.save_document(invoice())
        svc.finalize(DocumentType.INVOICE, "inv-1")

        with pytest.raises(CommandRejected) as info:
            svc.save_document(invoice(line_items=(item(quantity=5),)))
        assert info.value.code == "DOCUMENT_FINALIZED"
        assert store.get("invoices", "inv-1")["total"] == 100.0

        svc.unfinalize(DocumentType.INVOICE, "inv-1")
        svc.save_document(invoice(line_items=(item(quantity=5),)))
        assert store.get("invoices", "inv-1")["total"] == 250.0

    def test_finalize_is_idempotent(self):
        from core.primitives import DocumentType

        svc, store = self._svc()
        svc.save_document(invoice())
        svc.finalize(DocumentType.INVOICE, "inv-1")
        writes = len(store.write_log)
        assert svc.finalize(DocumentType.INVOICE, "inv-1").is_finalized
        assert len(store.write_log) == writes

    def test_set_workflow_status(self):
        from core.primitives import DocumentType
        from engines.invoicing.commands import SetWorkflowStatusRequest

        svc, store = self._svc()
        svc.save_document(invoice())
        doc = svc.set_workflow_status(SetWorkflowStatusRequest(DocumentType.INVOICE, "inv-1", "Packed"))
        assert doc.status == "Packed"
        assert store.get("invoices", "inv-1")["workflow_status"] == "Packed"

    def test_hand_picked_payment_status_keeps_workflow(self):
        from core.primitives import DocumentType
        from engines.invoicing.commands import SetWorkflowStatusRequest

        svc, _ = self._svc()
        svc.save_document(invoice(workflow_status="Sent", payments=(payment(40),)))
        doc = svc.set_workflow_status(SetWorkflowStatusRequest(DocumentType.INVOICE, "inv-1", "Paid"))
        assert doc.workflow_status == "Sent"
        assert doc.status == "Partially Paid"

    def test_void_overrides_payments(self):
        from core.primitives import DocumentType
        from engines.invoicing.commands import SetWorkflowStatusRequest

        svc, _ = self._svc()
        svc.save_document(invoice(payments=(payment(100),)))
        doc = svc.set_workflow_status(SetWorkflowStatusRequest(DocumentType.INVOICE, "inv-1", "Voided"))
        assert doc.status == "Voided"

    def test_empty_request_rejected(self):
        from core.primitives import DocumentType
        from engines.invoicing.commands import SetWorkflowStatusRequest

        with pytest.raises(ValueError, match="status"):
            SetWorkflowStatusRequest(DocumentType.INVOICE, "inv-1", "")


class TestNonStockPromotion:
    def _svc(self):
        from core.document_store import InMemoryDocumentStore
        from core.time import FixedClock
        from engines.invoicing.services import DocumentService

        store = InMemoryDocumentStore()
        return DocumentService(store=store, clock=FixedClock(NOW)), store

    def test_flagged_item_becomes_product(self):
        from core.context import ActorContext

        svc, store = self._svc()
        custom = item(
            "L2",
            quantity=1,
            unit_price="45.00",
            cost="30.00",
            is_non_stock=True,
            add_to_product_list=True,
            category="Gates",
        )
        result = svc.save_document(
            invoice(line_items=(item(), custom)),
            actor=ActorContext(actor_type="HUMAN", actor_id="u1", display_name="Dana"),
        )

        (product,) = result.created_products
        assert product.name == "Item L2"
        assert product.price == Decimal("45.00")
        assert product.category == "Gates"
        assert store.count("products") == 1

        stored_line = store.get("invoices", "inv-1")["line_items"][1]
        assert stored_line["product_ref"] == product.id
        assert stored_line["is_non_stock"] is False
        assert "add_to_product_list" not in stored_line

        (history,) = store.query("price_history")
        assert history["product_id"] == product.id
        assert history["changed_by"] == "Dana"
        assert "old_price" not in history

    def test_unflagged_non_stock_stays_put(self):
        svc, store = self._svc()
        result = svc.save_document(invoice(line_items=(item(is_non_stock=True),)))
        assert result.created_products == ()
        assert store.count("products") == 0

    def test_product_write_failure_leaves_document_unsaved(self):
        from core.document_store import StoreError

        svc, store = self._svc()
        store.inject_failure("put", "products")
        flagged = item(is_non_stock=True, add_to_product_list=True)
        with pytest.raises(StoreError):
            svc.save_document(invoice(line_items=(flagged,)))
        assert store.get("invoices", "inv-1") is None

    def test_retry_after_parent_failure_reuses_product(self):
        from core.document_store import StoreError

        svc, store = self._svc()
        store.inject_failure("put", "invoices", "inv-1")
        flagged = item(is_non_stock=True, add_to_product_list=True)
        with pytest.raises(StoreError):
            svc.save_document(invoice(line_items=(flagged,)))
        assert store.count("products") == 1

        result = svc.save_document(invoice(line_items=(flagged,)))
        assert result.created_products == ()
        assert store.count("products") == 1
        assert store.count("price_history") == 1
        stored_line = store.get("invoices", "inv-1")["line_items"][0]
        assert stored_line["product_ref"] == "invoices-inv-1-L1"


class TestEstimateConversion:
    def _svc(self):
        from core.document_store import InMemoryDocumentStore
        from core.time import FixedClock
        from engines.invoicing.services import DocumentService

        store = InMemoryDocumentStore()
        return DocumentService(store=store, clock=FixedClock(NOW)), store

    def _estimate(self):
        from core.primitives import DocumentType

        return invoice(
            doc_id="est-1",
            doc_type=DocumentType.ESTIMATE,
            document_number="E-7",
            line_items=(item(received_quantity=2),),
            workflow_status="Accepted",
            notes="Back yard run",
            po_number="PO-55",
        )

    def test_convert(self):
        from engines.invoicing.commands import ConvertEstimateRequest

        svc, store = self._svc()
        svc.save_document(self._estimate())
        result = svc.convert_estimate_to_order(
            ConvertEstimateRequest(estimate_id="est-1", order_number="O-100", order_id="ord-1")
        )

        order = result.document
        assert order.notes == "Converted from Estimate #E-7. Back yard run"
        assert order.status == "Ordered"
        assert order.source_ref == "est-1"
        assert order.po_number == "PO-55"
        assert order.total == Decimal("100.00")
        assert order.line_items[0].received_quantity == 0
        assert order.date == NOW
        assert store.get("orders", "ord-1")["document_number"] == "O-100"
        assert store.get("estimates", "est-1")["status"] == "Accepted"

    def test_notes_trimmed_when_estimate_has_none(self):
        from engines.invoicing.commands import ConvertEstimateRequest

        svc, _ = self._svc()
        svc.save_document(self._estimate().evolve(notes=""))
        order = svc.convert_estimate_to_order(
            ConvertEstimateRequest(estimate_id="est-1", order_number="O-101")
        ).document
        assert order.notes == "Converted from Estimate #E-7."

    def test_unknown_estimate_rejected(self):
        from core.commands import CommandRejected
        from engines.invoicing.commands import ConvertEstimateRequest

        svc, _ = self._svc()
        with pytest.raises(CommandRejected):
            svc.convert_estimate_to_order(ConvertEstimateRequest(estimate_id="x", order_number="O-1"))
