"""Dispute endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, get_dispute_policy
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.permissions import DisputePolicy
from app.domain.dispute_rules import CreationOverrides
from app.models.dispute import Dispute, DisputeProduct
from app.models.user import User
from app.schemas.dispute import (
    DisputeCreate,
    DisputeDetailResponse,
    DisputeExchange,
    DisputeListResponse,
    DisputeProductResponse,
    DisputeRefund,
    DisputeResponse,
    DisputeUpdate,
)
from app.services.dispute_service import dispute_service

router = APIRouter()


@router.get("/", response_model=DisputeListResponse)
async def list_disputes(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    order_id: UUID | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    sort_field: str | None = None,
    sort_type: str | None = Query(default=None, pattern="^(asc|desc)$"),
    limit: int = Query(default=10, ge=1),
    offset: int = Query(default=0, ge=0),
) -> DisputeListResponse:
    """List disputes; non-admins only see disputes they must resolve."""
    items, total = await dispute_service.list_disputes(
        db=db,
        actor=current_user,
        order_id=order_id,
        status=status_filter,
        sort_field=sort_field,
        sort_type=sort_type,
        limit=limit,
        offset=offset,
    )
    return DisputeListResponse(
        items=[DisputeResponse.model_validate(d) for d in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=DisputeResponse, status_code=status.HTTP_201_CREATED)
async def create_dispute(
    data: DisputeCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> Dispute:
    """Open a new dispute."""
    try:
        dispute = await dispute_service.create_dispute(
            db=db,
            actor=current_user,
            order_id=data.order_id,
            description=data.description,
            requested_refund_amount=data.requested_refund_amount,
            dispute_type=data.type,
            overrides=CreationOverrides(
                status=data.status.value if data.status else None,
                refund_status=data.refund_status.value if data.refund_status else None,
                refund_amount=data.refund_amount,
            ),
            policy=policy,
        )
    except AuthorizationError:
        # Don't reveal orders that belong to someone else
        raise NotFoundError("Order", str(data.order_id))

    await db.commit()
    return dispute


@router.get("/{dispute_id}", response_model=DisputeDetailResponse)
async def get_dispute(
    dispute_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> Dispute:
    """Get dispute details with its order, resolver and exchanged products."""
    return await dispute_service.get_dispute(
        db=db, actor=current_user, dispute_id=dispute_id, policy=policy
    )


@router.patch("/{dispute_id}", response_model=DisputeResponse)
async def update_dispute(
    dispute_id: UUID,
    data: DisputeUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> Dispute:
    """Edit a dispute's description, type or requested amount."""
    dispute = await dispute_service.update_dispute(
        db=db,
        actor=current_user,
        dispute_id=dispute_id,
        description=data.description,
        requested_refund_amount=data.requested_refund_amount,
        dispute_type=data.type,
        policy=policy,
    )
    await db.commit()
    return dispute


@router.post("/{dispute_id}/refund", response_model=DisputeResponse)
async def refund_dispute(
    dispute_id: UUID,
    data: DisputeRefund,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> Dispute:
    """Resolve a dispute with a partial or full refund."""
    dispute = await dispute_service.resolve_refund(
        db=db,
        actor=current_user,
        dispute_id=dispute_id,
        refund_amount=data.refund_amount,
        policy=policy,
    )
    await db.commit()
    return dispute


@router.post(
    "/{dispute_id}/exchange",
    response_model=list[DisputeProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def exchange_dispute(
    dispute_id: UUID,
    data: DisputeExchange,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> list[DisputeProduct]:
    """Resolve a dispute by exchanging purchased items (all or nothing)."""
    created = await dispute_service.resolve_exchange(
        db=db,
        actor=current_user,
        dispute_id=dispute_id,
        products=data.products,
        policy=policy,
    )
    await db.commit()
    return created


@router.delete("/{dispute_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dispute(
    dispute_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    policy: Annotated[DisputePolicy, Depends(get_dispute_policy)],
) -> None:
    """Delete a dispute (admin only)."""
    await dispute_service.delete_dispute(
        db=db, actor=current_user, dispute_id=dispute_id, policy=policy
    )
    await db.commit()
