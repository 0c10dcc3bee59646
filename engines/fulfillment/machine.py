"""
Yardbook Fulfillment Engine — Shop Status State Machine
========================================================
The fulfillment view lives on the order or invoice itself (vendor,
shop_status, receipt stamps, per-line received_quantity).

Transitions are operator-driven. The one automatic move happens when
received quantities are saved:

    total_received >= total_ordered   -> Received
    0 < total_received < total_ordered -> Partial Received
    otherwise                          -> unchanged

Stamps (received_date / received_by, ready_for_pick_up_date,
picked_up_date) are set once, when absent, and never overwritten.

Backorder and the pickup reminder are computed on read, never stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional

from core.commands.rejection import raise_first_rejection
from core.config import DEFAULT_RULES, LedgerRules
from core.context import ActorContext, actor_label
from core.money import to_decimal
from core.primitives.document import FinancialDocument, LineItem
from core.time import business_days_between
from engines.fulfillment.events import (
    RECEIPT_PROMOTABLE,
    RECEIPT_STATUSES,
    SHOP_PARTIAL_RECEIVED,
    SHOP_PENDING,
    SHOP_PICKED_UP,
    SHOP_READY_FOR_PICKUP,
    SHOP_RECEIVED,
    SHOP_STATUSES,
)
from engines.fulfillment.policies import (
    received_quantities_must_be_valid_policy,
    shop_status_must_be_known_policy,
    shop_status_must_not_be_terminal_policy,
    vendor_must_be_attached_policy,
)

logger = logging.getLogger("yardbook.fulfillment")


def shop_status_of(doc: FinancialDocument) -> str:
    return doc.shop_status or SHOP_PENDING


def attach_vendor(
    doc: FinancialDocument,
    vendor_ref: str,
    expected_delivery_date: Optional[datetime] = None,
) -> FinancialDocument:
    """Create (or re-point) the fulfillment view of a document."""
    if not vendor_ref:
        raise ValueError("vendor_ref must be non-empty.")
    return replace(
        doc,
        distributor=vendor_ref,
        shop_status=doc.shop_status or SHOP_PENDING,
        expected_delivery_date=expected_delivery_date or doc.expected_delivery_date,
    )


def _stamp(
    doc: FinancialDocument,
    status: str,
    now: datetime,
    actor: Optional[ActorContext],
) -> FinancialDocument:
    changes = {}
    if status in RECEIPT_STATUSES and doc.received_date is None:
        changes["received_date"] = now
        changes["received_by"] = actor_label(actor)
    if status == SHOP_READY_FOR_PICKUP and doc.ready_for_pick_up_date is None:
        changes["ready_for_pick_up_date"] = now
    if status == SHOP_PICKED_UP and doc.picked_up_date is None:
        changes["picked_up_date"] = now
    return replace(doc, **changes) if changes else doc


def transition(
    doc: FinancialDocument,
    new_status: str,
    now: datetime,
    actor: Optional[ActorContext] = None,
) -> FinancialDocument:
    raise_first_rejection([
        vendor_must_be_attached_policy(doc),
        shop_status_must_be_known_policy(new_status),
        shop_status_must_not_be_terminal_policy(doc),
    ])
    updated = _stamp(replace(doc, shop_status=new_status), new_status, now, actor)
    logger.debug("%s shop status %s -> %s", doc.document_number, shop_status_of(doc), new_status)
    return updated


def receipt_status(items: Iterable[LineItem]) -> Optional[str]:
    """Status implied by received quantities, or None to leave it alone."""
    total_ordered = Decimal(0)
    total_received = Decimal(0)
    for item in items:
        total_ordered += item.quantity
        total_received += item.received_quantity
    if total_received >= total_ordered:
        return SHOP_RECEIVED
    if total_received > 0:
        return SHOP_PARTIAL_RECEIVED
    return None


def reconcile_receipt(
    doc: FinancialDocument,
    received_quantities: Mapping[str, object],
    now: datetime,
    actor: Optional[ActorContext] = None,
    rules: LedgerRules = DEFAULT_RULES,
) -> FinancialDocument:
    """
    Save per-line received quantities and promote the shop status.

    Lines missing from received_quantities keep their saved value.
    """
    raise_first_rejection([
        vendor_must_be_attached_policy(doc),
        shop_status_must_not_be_terminal_policy(doc),
        received_quantities_must_be_valid_policy(
            doc, received_quantities, rules.over_receipt_tolerance
        ),
    ])
    items = tuple(
        replace(item, received_quantity=to_decimal(received_quantities[item.id]))
        if item.id in received_quantities
        else item
        for item in doc.line_items
    )
    updated = replace(doc, line_items=items)

    current = shop_status_of(doc)
    implied = receipt_status(items)
    if implied is not None and current in RECEIPT_PROMOTABLE:
        updated = _stamp(replace(updated, shop_status=implied), implied, now, actor)
        if implied != current:
            logger.info("%s receipt promoted %s -> %s", doc.document_number, current, implied)
    return updated


def backordered(item: LineItem) -> Decimal:
    return max(Decimal(0), item.quantity - item.received_quantity)


def backorders(doc: FinancialDocument) -> Dict[str, Decimal]:
    """Line id -> quantity still owed by the vendor, for lines still owed."""
    result = {}
    for item in doc.line_items:
        owed = backordered(item)
        if owed > 0:
            result[item.id] = owed
    return result


def needs_pickup_reminder(
    doc: FinancialDocument,
    now: datetime,
    rules: LedgerRules = DEFAULT_RULES,
) -> bool:
    if doc.shop_status != SHOP_READY_FOR_PICKUP or doc.ready_for_pick_up_date is None:
        return False
    elapsed = business_days_between(doc.ready_for_pick_up_date, now)
    return elapsed >= rules.pickup_reminder_business_days


@dataclass(frozen=True)
class FulfillmentSummary:
    """Shop board counters."""

    counts: Dict[str, int] = field(default_factory=dict)
    needs_reminder: int = 0

    def count(self, status: str) -> int:
        return self.counts.get(status, 0)


def fulfillment_summary(
    docs: Iterable[FinancialDocument],
    now: datetime,
    rules: LedgerRules = DEFAULT_RULES,
) -> FulfillmentSummary:
    counts = {status: 0 for status in SHOP_STATUSES}
    reminders = 0
    for doc in docs:
        if not doc.has_fulfillment_view:
            continue
        status = shop_status_of(doc)
        counts[status] = counts.get(status, 0) + 1
        if needs_pickup_reminder(doc, now, rules):
            reminders += 1
    return FulfillmentSummary(counts=counts, needs_reminder=reminders)
