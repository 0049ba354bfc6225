"""Dispute validation rules and creation defaults.

Every validator is a pure function: it returns a fresh, ordered list of
``FieldError`` and never raises. The service turns a non-empty list into a
``ValidationError``.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from app.core.exceptions import AuthorizationError
from app.domain.dispute_state import DisputeStatus, RefundStatus, classify_refund


@dataclass(frozen=True)
class FieldError:
    """A single field/message validation failure."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


def errors_as_dicts(errors: list[FieldError]) -> list[dict[str, str]]:
    """Serialize field errors for an API response."""
    return [error.as_dict() for error in errors]


# ============ CREATION DEFAULTS ============


class ActorRole(str, Enum):
    """How the caller relates to the disputed order."""

    HOST = "host"  # the host that sold the order
    COUNTERPARTY = "counterparty"  # the buyer
    OTHER = "other"  # staff acting on someone's behalf


@dataclass(frozen=True)
class CreationOverrides:
    """Optional resolution fields a caller may supply at creation."""

    status: str | None = None
    refund_status: str | None = None
    refund_amount: Decimal | None = None


@dataclass(frozen=True)
class CreationDefaults:
    """Fully populated resolver/status fields for a new dispute."""

    user_id: UUID
    status: str
    refund_status: str
    refund_amount: Decimal | None


def resolve_actor_role(
    actor_id: UUID,
    actor_role: str,
    order_user_id: UUID,
) -> ActorRole:
    """Classify the actor for a given order."""
    if actor_role == "host":
        return ActorRole.HOST
    if actor_id == order_user_id:
        return ActorRole.COUNTERPARTY
    return ActorRole.OTHER


def _host_defaults(
    actor_id: UUID,
    order_host_id: UUID,
    overrides: CreationOverrides,
) -> CreationDefaults:
    # A host never pre-sets the outcome of its own dispute.
    if order_host_id != actor_id:
        raise AuthorizationError("Order does not belong to this host")
    return CreationDefaults(
        user_id=actor_id,
        status=DisputeStatus.PENDING.value,
        refund_status=RefundStatus.NOT_APPLICABLE.value,
        refund_amount=None,
    )


def _counterparty_defaults(
    actor_id: UUID,
    order_host_id: UUID,
    overrides: CreationOverrides,
) -> CreationDefaults:
    return CreationDefaults(
        user_id=order_host_id,
        status=overrides.status or DisputeStatus.PENDING.value,
        refund_status=overrides.refund_status or RefundStatus.NOT_APPLICABLE.value,
        refund_amount=overrides.refund_amount,
    )


CREATION_STRATEGIES: dict[
    ActorRole, Callable[[UUID, UUID, CreationOverrides], CreationDefaults]
] = {
    ActorRole.HOST: _host_defaults,
    ActorRole.COUNTERPARTY: _counterparty_defaults,
    ActorRole.OTHER: _counterparty_defaults,
}


def creation_defaults(
    role: ActorRole,
    actor_id: UUID,
    order_host_id: UUID,
    overrides: CreationOverrides | None = None,
) -> CreationDefaults:
    """Pick the defaulting strategy for the actor's role and apply it.

    Raises:
        AuthorizationError: a host creating a dispute for another host's order
    """
    strategy = CREATION_STRATEGIES[role]
    return strategy(actor_id, order_host_id, overrides or CreationOverrides())


# ============ VALIDATORS ============


def validate_dispute_details(
    description: str | None,
    dispute_type: str | None,
    requested_refund_amount: Decimal | None,
    grand_total: Decimal,
) -> list[FieldError]:
    """Required fields and the order-total ceiling on the requested amount."""
    errors: list[FieldError] = []
    if not description or not description.strip():
        errors.append(FieldError("description", "The description field is required."))
    if not dispute_type or not dispute_type.strip():
        errors.append(FieldError("type", "The type field is required."))
    errors.extend(validate_requested_amount(requested_refund_amount, grand_total))
    return errors


def validate_requested_amount(
    requested_refund_amount: Decimal | None,
    grand_total: Decimal,
    refund_amount: Decimal | None = None,
) -> list[FieldError]:
    """Requested amount must lie within [refund already granted, order total]."""
    if requested_refund_amount is None:
        return [FieldError("requested_refund_amount", "The requested refund amount field is required.")]
    if requested_refund_amount < 0:
        return [FieldError("requested_refund_amount", "The requested refund amount must be at least 0.")]
    if requested_refund_amount > grand_total:
        return [FieldError("requested_refund_amount", "Amount greater than order total.")]
    if refund_amount is not None and requested_refund_amount < refund_amount:
        return [
            FieldError(
                "requested_refund_amount",
                "Requested amount cannot be lower than the refund already granted.",
            )
        ]
    return []


def validate_creation_defaults(
    defaults: CreationDefaults,
    requested_refund_amount: Decimal,
) -> list[FieldError]:
    """Supplied resolution fields must describe a state ``resolve_refund`` could reach.

    A recorded refund is at least 1, never above the requested amount, comes
    with ``refund_status`` completed and with the status its classification
    gives. Without a refund the dispute starts pending. Nothing can be created
    as exchanged since no products have been exchanged yet.
    """
    errors: list[FieldError] = []
    status_known = defaults.status in {s.value for s in DisputeStatus}
    if not status_known:
        errors.append(FieldError("status", f"Invalid status: {defaults.status}"))
    if defaults.refund_status not in {s.value for s in RefundStatus}:
        errors.append(FieldError("refund_status", f"Invalid refund status: {defaults.refund_status}"))

    refunded = defaults.refund_amount is not None
    amount_ok = False
    if refunded:
        if defaults.refund_amount < 1:
            errors.append(FieldError("refund_amount", "The refund amount must be at least 1."))
        elif defaults.refund_amount > requested_refund_amount:
            errors.append(FieldError("refund_amount", "You entered higher than requested amount."))
        else:
            amount_ok = True
    if refunded != (defaults.refund_status == RefundStatus.COMPLETED.value):
        errors.append(
            FieldError("refund_status", "Refund status must be completed exactly when a refund amount is set.")
        )

    if not status_known:
        return errors
    if defaults.status == DisputeStatus.EXCHANGED.value:
        errors.append(FieldError("status", "A dispute cannot be opened as exchanged."))
    elif amount_ok:
        expected = classify_refund(defaults.refund_amount, requested_refund_amount).value
        if defaults.status != expected:
            errors.append(FieldError("status", f"Status must be {expected} for this refund amount."))
    elif not refunded and defaults.status != DisputeStatus.PENDING.value:
        errors.append(FieldError("status", "Status must be pending until a refund is recorded."))
    return errors


def validate_refund(
    refund_amount: Decimal | None,
    requested_refund_amount: Decimal,
) -> list[FieldError]:
    """A refund is at least 1 and never above what was requested."""
    if refund_amount is None:
        return [FieldError("refund_amount", "The refund amount field is required.")]
    if refund_amount < 1:
        return [FieldError("refund_amount", "The refund amount must be at least 1.")]
    if refund_amount > requested_refund_amount:
        return [FieldError("refund_amount", "You entered higher than requested amount.")]
    return []


def validate_exchange_line(
    index: int,
    quantity: int,
    purchased_quantity: int | None,
) -> list[FieldError]:
    """Check one exchange entry against the purchased order item.

    ``purchased_quantity`` is None when the item is not part of the order.
    """
    prefix = f"products.{index}"
    if purchased_quantity is None:
        return [FieldError(f"{prefix}.order_item_id", "Order item id does not exist.")]
    if quantity < 1 or quantity > purchased_quantity:
        return [
            FieldError(
                f"{prefix}.quantity",
                "Quantity must be smaller or equal to order item quantity.",
            )
        ]
    return []
