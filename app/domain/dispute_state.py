"""Dispute state machine.

States: pending → partial_refund | full_refund | exchanged

The resolved states are terminal in the sense that nothing leads back to
pending. Whether a resolved dispute may be resolved again is a deployment
choice (``dispute_allow_reresolution``); when allowed, each resolution is
re-validated against the current row.
"""

from decimal import Decimal
from enum import Enum

from app.core.exceptions import ConflictError, ValidationError


class DisputeStatus(str, Enum):
    """Dispute lifecycle states."""

    PENDING = "pending"
    PARTIAL_REFUND = "partial_refund"
    FULL_REFUND = "full_refund"
    EXCHANGED = "exchanged"


class RefundStatus(str, Enum):
    """Whether a refund has been applied to a dispute."""

    NOT_APPLICABLE = "not_applicable"
    COMPLETED = "completed"


RESOLVED_STATUSES = frozenset(
    {DisputeStatus.PARTIAL_REFUND, DisputeStatus.FULL_REFUND, DisputeStatus.EXCHANGED}
)

REFUND_STATUSES = frozenset({DisputeStatus.PARTIAL_REFUND, DisputeStatus.FULL_REFUND})

# Nothing leads back to pending
DISPUTE_TRANSITIONS: dict[DisputeStatus, set[DisputeStatus]] = {
    status: set(RESOLVED_STATUSES) for status in DisputeStatus
}


def assert_dispute_transition(
    current: str,
    target: str,
    allow_reresolution: bool = True,
) -> None:
    """Validate dispute state transition."""
    current_status = DisputeStatus(current)
    target_status = DisputeStatus(target)

    if current_status in RESOLVED_STATUSES and not allow_reresolution:
        raise ConflictError("Dispute is already resolved")

    allowed = DISPUTE_TRANSITIONS.get(current_status, set())
    if target_status not in allowed:
        raise ValidationError(
            f"Invalid dispute transition: {current_status.value} → {target_status.value}"
        )


def classify_refund(refund_amount: Decimal, requested_refund_amount: Decimal) -> DisputeStatus:
    """Map a refund against the requested amount to a resolved status.

    Callers must reject refunds above the requested amount first.
    """
    if refund_amount < requested_refund_amount:
        return DisputeStatus.PARTIAL_REFUND
    if refund_amount == requested_refund_amount:
        return DisputeStatus.FULL_REFUND
    raise ValidationError("You entered higher than requested amount.")
