"""
Yardbook Command Layer — Rejection Model
==========================================
Structured rejection reasons for refused operations.

Policies return a RejectionReason (or None). Services turn the first
reason into a CommandRejected exception BEFORE any store write, so a
rejected operation never leaves partial state behind.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for refusing an operation.

    Fields:
        code:        Machine-readable rejection code (e.g. 'CUSTOMER_REQUIRED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


class CommandRejected(ValueError):
    """Validation failure. Not retryable without correcting the input."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message)

    @property
    def code(self) -> str:
        return self.reason.code


def raise_first_rejection(reasons: Iterable[Optional[RejectionReason]]) -> None:
    """Raise CommandRejected for the first non-None reason."""
    for reason in reasons:
        if reason is not None:
            raise CommandRejected(reason)


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes. Extensible by engines.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Payments ──────────────────────────────────────────────
    CUSTOMER_REQUIRED = "CUSTOMER_REQUIRED"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    NON_POSITIVE_AMOUNT = "NON_POSITIVE_AMOUNT"
    EMPTY_INVOICE_SELECTION = "EMPTY_INVOICE_SELECTION"
    INVOICE_NOT_OUTSTANDING = "INVOICE_NOT_OUTSTANDING"
    INSUFFICIENT_CREDIT = "INSUFFICIENT_CREDIT"
    INVOICE_CUSTOMER_MISMATCH = "INVOICE_CUSTOMER_MISMATCH"

    # ── Documents ─────────────────────────────────────────────
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    DOCUMENT_FINALIZED = "DOCUMENT_FINALIZED"
    DOCUMENT_VOIDED = "DOCUMENT_VOIDED"
    INVALID_STATUS = "INVALID_STATUS"
    PAYMENTS_NOT_ALLOWED = "PAYMENTS_NOT_ALLOWED"

    # ── Fulfillment ───────────────────────────────────────────
    NO_VENDOR_ATTACHED = "NO_VENDOR_ATTACHED"
    INVALID_SHOP_TRANSITION = "INVALID_SHOP_TRANSITION"
    INVALID_RECEIVED_QUANTITY = "INVALID_RECEIVED_QUANTITY"
    UNKNOWN_LINE_ITEM = "UNKNOWN_LINE_ITEM"
    UNKNOWN_SHOP_STATUS = "UNKNOWN_SHOP_STATUS"
