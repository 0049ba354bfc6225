"""Dispute database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.domain.dispute_state import DisputeStatus, RefundStatus

if TYPE_CHECKING:
    from app.models.order import Order, OrderItem
    from app.models.user import User


class Dispute(Base):
    """Claim against an order, resolved by refund or exchange."""

    __tablename__ = "disputes"
    __table_args__ = (
        UniqueConstraint("order_id", name="uq_disputes_order_id"),
        CheckConstraint(
            "refund_amount IS NULL OR refund_amount <= requested_refund_amount",
            name="ck_disputes_refund_within_requested",
        ),
    )
    # Timestamps are read back on flush; async sessions cannot lazy-load them
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )  # party responsible for resolving

    # Details
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Amounts
    requested_refund_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    refund_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    # Status: pending → partial_refund | full_refund | exchanged
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DisputeStatus.PENDING.value, index=True
    )
    refund_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RefundStatus.NOT_APPLICABLE.value
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="dispute")
    user: Mapped["User"] = relationship("User", back_populates="assigned_disputes")
    products: Mapped[list["DisputeProduct"]] = relationship(
        "DisputeProduct",
        back_populates="dispute",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DisputeProduct.created_at",
    )


class DisputeProduct(Base):
    """One exchanged line of a dispute."""

    __tablename__ = "dispute_products"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    dispute_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("disputes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("order_items.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    dispute: Mapped["Dispute"] = relationship("Dispute", back_populates="products")
    order_item: Mapped["OrderItem"] = relationship("OrderItem")
