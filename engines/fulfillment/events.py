"""Yardbook Fulfillment Engine - shop statuses."""

from __future__ import annotations

SHOP_PENDING = "Pending"
SHOP_ORDERED = "Ordered"
SHOP_SHIPPED = "Shipped"
SHOP_PARTIAL_RECEIVED = "Partial Received"
SHOP_RECEIVED = "Received"
SHOP_READY_FOR_PICKUP = "Ready for Pickup"
SHOP_PICKED_UP = "Picked Up"
SHOP_DISCREPANCY = "Discrepancy"
SHOP_VOIDED = "Voided"

# Forward path, in order.
SHOP_FLOW = (
    SHOP_PENDING,
    SHOP_ORDERED,
    SHOP_SHIPPED,
    SHOP_PARTIAL_RECEIVED,
    SHOP_RECEIVED,
    SHOP_READY_FOR_PICKUP,
    SHOP_PICKED_UP,
)

SHOP_STATUSES = SHOP_FLOW + (SHOP_DISCREPANCY, SHOP_VOIDED)

TERMINAL_SHOP_STATUSES = frozenset({SHOP_VOIDED})

RECEIPT_STATUSES = frozenset({SHOP_PARTIAL_RECEIVED, SHOP_RECEIVED})

# Statuses a saved receipt may promote from. Once goods are staged
# for pickup or gone, re-saving quantities does not move them back.
RECEIPT_PROMOTABLE = frozenset({
    SHOP_PENDING,
    SHOP_ORDERED,
    SHOP_SHIPPED,
    SHOP_PARTIAL_RECEIVED,
    SHOP_RECEIVED,
    SHOP_DISCREPANCY,
})
