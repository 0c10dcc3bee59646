"""
Yardbook Command Layer — Public API
=====================================
Every refused operation carries a structured RejectionReason.
"""

from core.commands.rejection import (
    CommandRejected,
    ReasonCode,
    RejectionReason,
    raise_first_rejection,
)

__all__ = [
    "CommandRejected",
    "ReasonCode",
    "RejectionReason",
    "raise_first_rejection",
]
