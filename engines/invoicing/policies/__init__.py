"""Yardbook Invoicing Engine - policies."""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.document import DocumentType, FinancialDocument
from engines.invoicing.status import STATUSES_BY_TYPE


def document_must_exist_policy(
    doc: Optional[FinancialDocument],
    doc_id: str,
) -> RejectionReason | None:
    if doc is None:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_NOT_FOUND,
            message=f"Document '{doc_id}' not found.",
            policy_name="document_must_exist_policy",
        )
    return None


def document_must_not_be_finalized_policy(
    stored: Optional[FinancialDocument],
) -> RejectionReason | None:
    if stored is not None and stored.is_finalized:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_FINALIZED,
            message=(
                f"{stored.doc_type.value.title()} {stored.document_number} is finalized; "
                "unfinalize it before editing."
            ),
            policy_name="document_must_not_be_finalized_policy",
        )
    return None


def workflow_status_must_be_valid_policy(
    doc_type: DocumentType,
    workflow_status: Optional[str],
) -> RejectionReason | None:
    if workflow_status is None:
        return None
    if workflow_status not in STATUSES_BY_TYPE[doc_type]:
        return RejectionReason(
            code=ReasonCode.INVALID_STATUS,
            message=f"Status '{workflow_status}' is not valid for {doc_type.value.lower()}s.",
            policy_name="workflow_status_must_be_valid_policy",
        )
    return None
