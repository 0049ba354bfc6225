"""Tests for dispute validators and creation defaults."""

import uuid
from decimal import Decimal

import pytest

from app.core.exceptions import AuthorizationError
from app.domain.dispute_rules import (
    ActorRole,
    CreationDefaults,
    CreationOverrides,
    FieldError,
    creation_defaults,
    errors_as_dicts,
    resolve_actor_role,
    validate_creation_defaults,
    validate_dispute_details,
    validate_exchange_line,
    validate_refund,
    validate_requested_amount,
)


class TestResolveActorRole:

    def test_host_role_wins(self):
        actor_id = uuid.uuid4()
        assert resolve_actor_role(actor_id, "host", actor_id) == ActorRole.HOST

    def test_buyer_is_counterparty(self):
        actor_id = uuid.uuid4()
        assert resolve_actor_role(actor_id, "customer", actor_id) == ActorRole.COUNTERPARTY

    def test_staff_is_other(self):
        assert resolve_actor_role(uuid.uuid4(), "admin", uuid.uuid4()) == ActorRole.OTHER


class TestCreationDefaults:

    def test_host_defaults_discard_overrides(self):
        host_id = uuid.uuid4()
        defaults = creation_defaults(
            ActorRole.HOST,
            host_id,
            host_id,
            CreationOverrides(status="full_refund", refund_status="completed", refund_amount=Decimal("5")),
        )
        assert defaults == CreationDefaults(
            user_id=host_id,
            status="pending",
            refund_status="not_applicable",
            refund_amount=None,
        )

    def test_host_of_another_order_is_refused(self):
        with pytest.raises(AuthorizationError) as exc_info:
            creation_defaults(ActorRole.HOST, uuid.uuid4(), uuid.uuid4())
        assert exc_info.value.detail == "Order does not belong to this host"

    def test_counterparty_defaults_to_order_host(self):
        host_id = uuid.uuid4()
        defaults = creation_defaults(ActorRole.COUNTERPARTY, uuid.uuid4(), host_id)
        assert defaults.user_id == host_id
        assert defaults.status == "pending"
        assert defaults.refund_status == "not_applicable"
        assert defaults.refund_amount is None

    def test_other_keeps_supplied_values(self):
        host_id = uuid.uuid4()
        defaults = creation_defaults(
            ActorRole.OTHER,
            uuid.uuid4(),
            host_id,
            CreationOverrides(status="partial_refund", refund_status="completed", refund_amount=Decimal("10")),
        )
        assert defaults.user_id == host_id
        assert defaults.status == "partial_refund"
        assert defaults.refund_status == "completed"
        assert defaults.refund_amount == Decimal("10")


class TestValidateDisputeDetails:

    def test_valid(self):
        assert validate_dispute_details("Broken", "damaged", Decimal("100.00"), Decimal("100.00")) == []

    def test_missing_fields_reported_in_order(self):
        errors = validate_dispute_details("  ", "", None, Decimal("100.00"))
        assert [e.field for e in errors] == ["description", "type", "requested_refund_amount"]

    def test_amount_above_order_total(self):
        errors = validate_dispute_details("Broken", "damaged", Decimal("150.00"), Decimal("100.00"))
        assert errors == [FieldError("requested_refund_amount", "Amount greater than order total.")]

    def test_negative_amount(self):
        errors = validate_requested_amount(Decimal("-1"), Decimal("100.00"))
        assert errors[0].field == "requested_refund_amount"

    def test_zero_amount_is_allowed(self):
        assert validate_requested_amount(Decimal("0"), Decimal("100.00")) == []

    def test_cannot_drop_below_granted_refund(self):
        errors = validate_requested_amount(Decimal("50"), Decimal("100"), refund_amount=Decimal("60"))
        assert len(errors) == 1

    def test_each_call_returns_a_fresh_list(self):
        first = validate_dispute_details("", "damaged", Decimal("1"), Decimal("100"))
        second = validate_dispute_details("", "damaged", Decimal("1"), Decimal("100"))
        assert first == second
        assert first is not second


class TestValidateCreationDefaults:

    def _defaults(self, **kwargs):
        values = {
            "user_id": uuid.uuid4(),
            "status": "pending",
            "refund_status": "not_applicable",
            "refund_amount": None,
        }
        values.update(kwargs)
        return CreationDefaults(**values)

    def test_plain_defaults_are_valid(self):
        assert validate_creation_defaults(self._defaults(), Decimal("100")) == []

    def test_refund_above_requested(self):
        errors = validate_creation_defaults(
            self._defaults(refund_amount=Decimal("120"), refund_status="completed"), Decimal("100")
        )
        assert [e.field for e in errors] == ["refund_amount"]

    def test_completed_without_amount(self):
        errors = validate_creation_defaults(self._defaults(refund_status="completed"), Decimal("100"))
        assert [e.field for e in errors] == ["refund_status"]

    def test_amount_without_completed(self):
        errors = validate_creation_defaults(self._defaults(refund_amount=Decimal("10")), Decimal("100"))
        assert [e.field for e in errors] == ["refund_status", "status"]

    def test_unknown_status(self):
        errors = validate_creation_defaults(self._defaults(status="archived"), Decimal("100"))
        assert errors[0].field == "status"

    def test_refund_matching_its_classification(self):
        partial = self._defaults(status="partial_refund", refund_status="completed", refund_amount=Decimal("40"))
        full = self._defaults(status="full_refund", refund_status="completed", refund_amount=Decimal("100"))
        assert validate_creation_defaults(partial, Decimal("100")) == []
        assert validate_creation_defaults(full, Decimal("100")) == []

    def test_status_contradicting_refund(self):
        errors = validate_creation_defaults(
            self._defaults(status="full_refund", refund_status="completed", refund_amount=Decimal("10")),
            Decimal("100"),
        )
        assert errors == [FieldError("status", "Status must be partial_refund for this refund amount.")]

    def test_resolved_status_without_refund(self):
        errors = validate_creation_defaults(self._defaults(status="partial_refund"), Decimal("100"))
        assert errors == [FieldError("status", "Status must be pending until a refund is recorded.")]

    def test_zero_refund(self):
        errors = validate_creation_defaults(
            self._defaults(refund_status="completed", refund_amount=Decimal("0")), Decimal("100")
        )
        assert errors == [FieldError("refund_amount", "The refund amount must be at least 1.")]

    def test_exchanged_is_rejected(self):
        errors = validate_creation_defaults(self._defaults(status="exchanged"), Decimal("100"))
        assert [e.field for e in errors] == ["status"]


class TestValidateRefund:

    def test_valid(self):
        assert validate_refund(Decimal("60"), Decimal("100")) == []

    def test_zero_is_rejected(self):
        assert validate_refund(Decimal("0"), Decimal("100"))[0].message == "The refund amount must be at least 1."

    def test_above_requested(self):
        errors = validate_refund(Decimal("101"), Decimal("100"))
        assert errors_as_dicts(errors) == [
            {"field": "refund_amount", "message": "You entered higher than requested amount."}
        ]


class TestValidateExchangeLine:

    def test_valid(self):
        assert validate_exchange_line(0, 2, 2) == []

    def test_item_not_on_order(self):
        errors = validate_exchange_line(3, 1, None)
        assert errors == [FieldError("products.3.order_item_id", "Order item id does not exist.")]

    def test_quantity_above_purchased(self):
        errors = validate_exchange_line(0, 3, 2)
        assert errors == [
            FieldError("products.0.quantity", "Quantity must be smaller or equal to order item quantity.")
        ]

    def test_zero_quantity(self):
        assert validate_exchange_line(0, 0, 2)[0].field == "products.0.quantity"
