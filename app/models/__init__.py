"""Database models."""

from app.models.dispute import Dispute, DisputeProduct
from app.models.order import Order, OrderItem
from app.models.user import User

__all__ = [
    # User
    "User",
    # Order
    "Order",
    "OrderItem",
    # Dispute
    "Dispute",
    "DisputeProduct",
]
