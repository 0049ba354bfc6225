"""Dispute resolution service."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.core.permissions import AuthorizationPolicy, dispute_policy, is_admin
from app.domain.dispute_rules import (
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
from app.domain.dispute_state import (
    REFUND_STATUSES,
    DisputeStatus,
    RefundStatus,
    assert_dispute_transition,
    classify_refund,
)
from app.models.dispute import Dispute, DisputeProduct
from app.models.user import User
from app.schemas.dispute import ExchangeProductIn
from app.services.order_store import get_order, get_order_item

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Dispute.created_at,
    "updated_at": Dispute.updated_at,
    "requested_refund_amount": Dispute.requested_refund_amount,
    "status": Dispute.status,
}


def _raise_if_invalid(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError(errors[0].message, errors=errors_as_dicts(errors))


class DisputeService:
    """Service for the dispute lifecycle: creation, refund and exchange."""

    async def create_dispute(
        self,
        db: AsyncSession,
        actor: User,
        order_id: UUID,
        description: str,
        requested_refund_amount: Decimal,
        dispute_type: str,
        overrides: CreationOverrides | None = None,
        policy: AuthorizationPolicy = dispute_policy,
    ) -> Dispute:
        """Open a dispute against an order.

        The resolver and initial status depend on who is asking: a host opens
        the dispute on its own behalf, anybody else opens it against the
        order's host.

        Raises:
            NotFoundError: the order does not exist
            AuthorizationError: the actor may not dispute this order
            ConflictError: the order already has a dispute
            ValidationError: missing fields, amount above the order total, or
                supplied resolution fields that contradict each other
        """
        order = await get_order(db, order_id)
        if not order:
            raise NotFoundError("Order", str(order_id))

        # Standing first, so a foreign order's dispute state is never revealed
        if not policy.can_create(actor, order):
            raise AuthorizationError("You cannot open a dispute for this order")
        role = resolve_actor_role(actor.id, actor.role, order.user_id)
        defaults = creation_defaults(role, actor.id, order.host_id, overrides)

        if await self._dispute_id_for_order(db, order_id) is not None:
            raise ConflictError("A dispute already exists for this order")

        _raise_if_invalid(
            validate_dispute_details(
                description, dispute_type, requested_refund_amount, order.grand_total
            )
        )
        _raise_if_invalid(validate_creation_defaults(defaults, requested_refund_amount))

        dispute = Dispute(
            order_id=order.id,
            user_id=defaults.user_id,
            description=description.strip(),
            type=dispute_type.strip(),
            requested_refund_amount=requested_refund_amount,
            refund_amount=defaults.refund_amount,
            status=defaults.status,
            refund_status=defaults.refund_status,
        )
        db.add(dispute)
        try:
            await db.flush()
        except IntegrityError:
            # Lost the race against a concurrent creation on the same order
            await db.rollback()
            logger.warning(f"Concurrent dispute creation rejected for order {order_id}")
            raise ConflictError("A dispute already exists for this order")

        logger.info(
            f"Dispute {dispute.id} opened on order {order_id} by {role.value} {actor.id}"
        )
        return dispute

    async def get_dispute(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        policy: AuthorizationPolicy = dispute_policy,
    ) -> Dispute:
        """Get a dispute with its order, resolver and exchanged products."""
        return await self._get_visible_dispute(db, actor, dispute_id, policy)

    async def list_disputes(
        self,
        db: AsyncSession,
        actor: User,
        order_id: UUID | None = None,
        status: str | None = None,
        sort_field: str | None = None,
        sort_type: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Dispute], int]:
        """List disputes visible to the actor, newest first by default."""
        query = select(Dispute)
        if not is_admin(actor):
            query = query.where(Dispute.user_id == actor.id)
        if order_id:
            query = query.where(Dispute.order_id == order_id)
        if status:
            query = query.where(Dispute.status == status)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar_one()

        column = SORTABLE_FIELDS.get(sort_field or "", Dispute.created_at)
        if sort_field in SORTABLE_FIELDS and (sort_type or "").lower() == "asc":
            query = query.order_by(column.asc())
        else:
            query = query.order_by(column.desc())

        limit = max(1, min(limit, settings.dispute_max_page_size))
        result = await db.execute(
            query.options(selectinload(Dispute.order)).limit(limit).offset(max(0, offset))
        )
        return list(result.scalars().all()), total

    async def update_dispute(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        description: str,
        requested_refund_amount: Decimal,
        dispute_type: str,
        policy: AuthorizationPolicy = dispute_policy,
    ) -> Dispute:
        """Edit the claim itself; the order and resolver never change."""
        dispute = await self._get_visible_dispute(db, actor, dispute_id, policy, for_update=True)
        if not policy.can_update(actor, dispute):
            raise AuthorizationError("You cannot update this dispute")

        errors = validate_dispute_details(
            description, dispute_type, requested_refund_amount, dispute.order.grand_total
        )
        if not errors:
            errors = validate_requested_amount(
                requested_refund_amount, dispute.order.grand_total, dispute.refund_amount
            )
        _raise_if_invalid(errors)

        dispute.description = description.strip()
        dispute.type = dispute_type.strip()
        dispute.requested_refund_amount = requested_refund_amount
        if dispute.refund_amount is not None and DisputeStatus(dispute.status) in REFUND_STATUSES:
            # A recorded refund is re-classified against the new requested amount
            previous_status = dispute.status
            dispute.status = classify_refund(dispute.refund_amount, requested_refund_amount).value
            if dispute.status != previous_status:
                logger.info(
                    f"Dispute {dispute.id} reclassified on update: {previous_status} → {dispute.status}"
                )
        await db.flush()

        logger.info(f"Dispute {dispute.id} updated by {actor.id}")
        return dispute

    async def resolve_refund(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        refund_amount: Decimal,
        policy: AuthorizationPolicy = dispute_policy,
    ) -> Dispute:
        """Refund a dispute, partially or in full.

        The row is locked and re-read first, so the amount is checked against
        the latest committed requested amount.
        """
        dispute = await self._get_visible_dispute(db, actor, dispute_id, policy, for_update=True)
        if not policy.can_resolve(actor, dispute):
            raise AuthorizationError("You cannot resolve this dispute")

        _raise_if_invalid(validate_refund(refund_amount, dispute.requested_refund_amount))

        new_status = classify_refund(refund_amount, dispute.requested_refund_amount)
        assert_dispute_transition(
            dispute.status, new_status.value, settings.dispute_allow_reresolution
        )

        previous_status = dispute.status
        dispute.refund_amount = refund_amount
        dispute.status = new_status.value
        dispute.refund_status = RefundStatus.COMPLETED.value
        try:
            await db.flush()
        except IntegrityError:
            # ck_disputes_refund_within_requested caught a concurrent edit
            await db.rollback()
            logger.warning(f"Refund on dispute {dispute_id} rejected by storage constraint")
            raise ConflictError("Dispute changed while refunding, please retry")

        logger.info(
            f"Dispute {dispute.id} refunded {refund_amount} of "
            f"{dispute.requested_refund_amount}: {previous_status} → {new_status.value}"
        )
        return dispute

    async def resolve_exchange(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        products: Sequence[ExchangeProductIn],
        policy: AuthorizationPolicy = dispute_policy,
    ) -> list[DisputeProduct]:
        """Resolve a dispute by exchanging purchased items.

        Entries are reconciled in order against the dispute's order items and
        the first bad entry aborts the call. Nothing is written unless every
        entry passes; the products and the status change are then flushed
        together, and a storage failure rolls the whole unit back.
        """
        dispute = await self._get_visible_dispute(db, actor, dispute_id, policy, for_update=True)
        if not policy.can_resolve(actor, dispute):
            raise AuthorizationError("You cannot resolve this dispute")

        if not products:
            _raise_if_invalid([FieldError("products", "The products field is required.")])

        assert_dispute_transition(
            dispute.status, DisputeStatus.EXCHANGED.value, settings.dispute_allow_reresolution
        )

        created: list[DisputeProduct] = []
        for index, line in enumerate(products):
            order_item = await get_order_item(db, line.order_item_id, dispute.order_id)
            errors = validate_exchange_line(
                index, line.quantity, order_item.quantity if order_item else None
            )
            if errors:
                logger.warning(
                    f"Exchange on dispute {dispute.id} rejected at entry {index}: {errors[0].message}"
                )
                raise ValidationError(errors[0].message, errors=errors_as_dicts(errors))

            created.append(
                DisputeProduct(
                    dispute_id=dispute.id,
                    order_item_id=line.order_item_id,
                    quantity=line.quantity,
                    notes=line.notes,
                )
            )

        try:
            dispute.products.extend(created)
            dispute.status = DisputeStatus.EXCHANGED.value
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Exchange on dispute {dispute_id} rolled back: {e}")
            raise PersistenceError("Exchange could not be saved")

        logger.info(f"Dispute {dispute.id} exchanged {len(created)} item(s)")
        return created

    async def delete_dispute(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        policy: AuthorizationPolicy = dispute_policy,
    ) -> None:
        """Hard-delete a dispute and its exchanged products."""
        dispute = await self._get_visible_dispute(db, actor, dispute_id, policy)
        if not policy.can_delete(actor, dispute):
            raise AuthorizationError("You cannot delete this dispute")

        await db.delete(dispute)
        await db.flush()
        logger.info(f"Dispute {dispute_id} deleted by {actor.id}")

    async def _dispute_id_for_order(self, db: AsyncSession, order_id: UUID) -> UUID | None:
        result = await db.execute(select(Dispute.id).where(Dispute.order_id == order_id))
        return result.scalar_one_or_none()

    async def _get_visible_dispute(
        self,
        db: AsyncSession,
        actor: User,
        dispute_id: UUID,
        policy: AuthorizationPolicy,
        for_update: bool = False,
    ) -> Dispute:
        """Get dispute by ID or raise NotFoundError.

        Disputes the actor may not see are reported as missing.
        """
        query = (
            select(Dispute)
            .where(Dispute.id == dispute_id)
            .options(
                selectinload(Dispute.order),
                selectinload(Dispute.user),
                selectinload(Dispute.products),
            )
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await db.execute(query)
        dispute = result.scalar_one_or_none()
        if not dispute or not policy.can_view(actor, dispute):
            raise NotFoundError("Dispute", str(dispute_id))
        return dispute


dispute_service = DisputeService()
