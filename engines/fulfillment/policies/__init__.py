"""Yardbook Fulfillment Engine - policies."""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from core.commands.rejection import ReasonCode, RejectionReason
from core.money import to_decimal
from core.primitives.document import FinancialDocument
from engines.fulfillment.events import SHOP_STATUSES, TERMINAL_SHOP_STATUSES


def vendor_must_be_attached_policy(doc: FinancialDocument) -> RejectionReason | None:
    if not doc.has_fulfillment_view:
        return RejectionReason(
            code=ReasonCode.NO_VENDOR_ATTACHED,
            message=f"{doc.document_number} has no vendor attached.",
            policy_name="vendor_must_be_attached_policy",
        )
    return None


def shop_status_must_be_known_policy(status: str) -> RejectionReason | None:
    if status not in SHOP_STATUSES:
        return RejectionReason(
            code=ReasonCode.UNKNOWN_SHOP_STATUS,
            message=f"Shop status '{status}' is not valid. Must be one of: {list(SHOP_STATUSES)}",
            policy_name="shop_status_must_be_known_policy",
        )
    return None


def shop_status_must_not_be_terminal_policy(doc: FinancialDocument) -> RejectionReason | None:
    if doc.shop_status in TERMINAL_SHOP_STATUSES:
        return RejectionReason(
            code=ReasonCode.INVALID_SHOP_TRANSITION,
            message=f"{doc.document_number} is {doc.shop_status}; its shop status can no longer change.",
            policy_name="shop_status_must_not_be_terminal_policy",
        )
    return None


def received_quantities_must_be_valid_policy(
    doc: FinancialDocument,
    received: Mapping[str, object],
    tolerance: Decimal,
) -> RejectionReason | None:
    for line_id, raw in received.items():
        item = doc.line_item(line_id)
        if item is None:
            return RejectionReason(
                code=ReasonCode.UNKNOWN_LINE_ITEM,
                message=f"Line item '{line_id}' is not on {doc.document_number}.",
                policy_name="received_quantities_must_be_valid_policy",
            )
        try:
            quantity = to_decimal(raw)
        except (TypeError, ValueError):
            return RejectionReason(
                code=ReasonCode.INVALID_RECEIVED_QUANTITY,
                message=f"Received quantity for '{item.name}' is not a number.",
                policy_name="received_quantities_must_be_valid_policy",
            )
        if quantity < 0:
            return RejectionReason(
                code=ReasonCode.INVALID_RECEIVED_QUANTITY,
                message=f"Received quantity for '{item.name}' cannot be negative.",
                policy_name="received_quantities_must_be_valid_policy",
            )
        if quantity > item.quantity + tolerance:
            return RejectionReason(
                code=ReasonCode.INVALID_RECEIVED_QUANTITY,
                message=(
                    f"Received {quantity} of '{item.name}' but only "
                    f"{item.quantity} were ordered."
                ),
                policy_name="received_quantities_must_be_valid_policy",
            )
    return None
