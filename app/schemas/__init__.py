"""Pydantic schemas for API validation."""

from app.schemas.dispute import (
    DisputeCreate,
    DisputeDetailResponse,
    DisputeExchange,
    DisputeListResponse,
    DisputeProductResponse,
    DisputeRefund,
    DisputeResponse,
    DisputeUpdate,
    ExchangeProductIn,
)

__all__ = [
    # Dispute
    "DisputeCreate",
    "DisputeUpdate",
    "DisputeRefund",
    "DisputeExchange",
    "ExchangeProductIn",
    "DisputeResponse",
    "DisputeDetailResponse",
    "DisputeProductResponse",
    "DisputeListResponse",
]
