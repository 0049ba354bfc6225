"""Dispute-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.dispute_state import DisputeStatus, RefundStatus


class DisputeCreate(BaseModel):
    """Schema for opening a dispute.

    ``status``, ``refund_status`` and ``refund_amount`` are ignored when the
    caller is the order's host.
    """

    order_id: UUID
    description: str = Field(..., min_length=1, max_length=5000)
    requested_refund_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    type: str = Field(..., min_length=1, max_length=50)
    status: DisputeStatus | None = None
    refund_status: RefundStatus | None = None
    refund_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class DisputeUpdate(BaseModel):
    """Schema for editing a dispute's claim."""

    description: str = Field(..., min_length=1, max_length=5000)
    requested_refund_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    type: str = Field(..., min_length=1, max_length=50)


class DisputeRefund(BaseModel):
    """Schema for resolving a dispute with a refund."""

    refund_amount: Decimal = Field(..., ge=1, max_digits=12, decimal_places=2)


class ExchangeProductIn(BaseModel):
    """One item to exchange."""

    order_item_id: UUID
    quantity: int = Field(..., ge=1)
    notes: str | None = Field(default=None, max_length=2000)


class DisputeExchange(BaseModel):
    """Schema for resolving a dispute with an exchange."""

    products: list[ExchangeProductIn] = Field(..., min_length=1)


class DisputeProductResponse(BaseModel):
    """Schema for an exchanged product."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dispute_id: UUID
    order_item_id: UUID
    quantity: int
    notes: str | None
    created_at: datetime | None


class DisputeOrderSummary(BaseModel):
    """Order fields shown alongside a dispute."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    host_id: UUID
    grand_total: Decimal
    status: str


class DisputeUserSummary(BaseModel):
    """Resolver fields shown alongside a dispute."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: str
    full_name: str


class DisputeResponse(BaseModel):
    """Schema for dispute response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    user_id: UUID
    description: str
    type: str
    requested_refund_amount: Decimal
    refund_amount: Decimal | None
    status: DisputeStatus
    refund_status: RefundStatus
    created_at: datetime | None
    updated_at: datetime | None


class DisputeDetailResponse(DisputeResponse):
    """Schema for a single dispute with its related records."""

    order: DisputeOrderSummary
    user: DisputeUserSummary
    products: list[DisputeProductResponse] = []


class DisputeListResponse(BaseModel):
    """Paginated list of disputes."""

    items: list[DisputeResponse]
    total: int
    limit: int
    offset: int
