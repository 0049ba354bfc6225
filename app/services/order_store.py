"""Read-only access to orders and order items."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order, OrderItem


async def get_order(db: AsyncSession, order_id: UUID) -> Order | None:
    """Get an order by ID."""
    result = await db.execute(select(Order).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def get_order_item(db: AsyncSession, item_id: UUID, order_id: UUID) -> OrderItem | None:
    """Get an order item, scoped to its order.

    An item id that belongs to a different order is treated as missing.
    """
    result = await db.execute(
        select(OrderItem).where(
            OrderItem.id == item_id,
            OrderItem.order_id == order_id,
        )
    )
    return result.scalar_one_or_none()
