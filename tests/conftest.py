"""Test fixtures and configuration."""

import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.security import create_token_for_user
from app.database import Base
from app.models.dispute import Dispute
from app.models.order import Order, OrderItem
from app.models.user import User


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine for testing."""
    # StaticPool keeps every connection on the same in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------
# Factories commit so that a rollback inside the code under test cannot take
# the seeded rows with it.


def make_uuid():
    return uuid.uuid4()


@pytest.fixture
def user_factory(db: AsyncSession):
    """Factory to create test users."""
    async def _create(role="customer", **kwargs):
        user = User(
            id=kwargs.pop("id", make_uuid()),
            email=kwargs.pop("email", f"{role}-{uuid.uuid4().hex[:8]}@example.com"),
            role=role,
            first_name=kwargs.pop("first_name", role.title()),
            last_name=kwargs.pop("last_name", "Tester"),
            is_active=kwargs.pop("is_active", True),
            **kwargs,
        )
        db.add(user)
        await db.commit()
        return user
    return _create


@pytest.fixture
def order_factory(db: AsyncSession):
    """Factory to create test orders with their line items.

    ``items`` is a list of purchased quantities.
    """
    async def _create(buyer, host, grand_total=Decimal("100.00"), items=(2,), **kwargs):
        order = Order(
            id=kwargs.pop("id", make_uuid()),
            user_id=buyer.id,
            host_id=host.id,
            grand_total=grand_total,
            status=kwargs.pop("status", "delivered"),
            **kwargs,
        )
        db.add(order)
        await db.flush()
        for index, quantity in enumerate(items):
            db.add(
                OrderItem(
                    id=make_uuid(),
                    order_id=order.id,
                    product_name=f"Product {index + 1}",
                    quantity=quantity,
                    unit_price=Decimal("10.00"),
                )
            )
        await db.commit()
        return order
    return _create


@pytest.fixture
def order_items(db: AsyncSession):
    """Load an order's items in insertion order."""
    async def _load(order):
        result = await db.execute(
            select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.product_name)
        )
        return list(result.scalars().all())
    return _load


@pytest.fixture
def dispute_factory(db: AsyncSession):
    """Factory to insert disputes directly, bypassing the service."""
    async def _create(order, requested_refund_amount=Decimal("100.00"), **kwargs):
        dispute = Dispute(
            id=kwargs.pop("id", make_uuid()),
            order_id=order.id,
            user_id=kwargs.pop("user_id", order.host_id),
            description=kwargs.pop("description", "Item arrived damaged"),
            type=kwargs.pop("type", "damaged"),
            requested_refund_amount=requested_refund_amount,
            **kwargs,
        )
        db.add(dispute)
        await db.commit()
        return dispute
    return _create


# ---------------------------------------------------------------------------
# Common actors
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def host(user_factory):
    return await user_factory(role="host")


@pytest_asyncio.fixture
async def other_host(user_factory):
    return await user_factory(role="host")


@pytest_asyncio.fixture
async def buyer(user_factory):
    return await user_factory(role="customer")


@pytest_asyncio.fixture
async def admin(user_factory):
    return await user_factory(role="admin")


@pytest_asyncio.fixture
async def order(order_factory, buyer, host):
    """A 100.00 order with one item of quantity 2 and one of quantity 5."""
    return await order_factory(buyer, host, grand_total=Decimal("100.00"), items=(2, 5))


@pytest.fixture
def auth_headers():
    """Build a bearer header for a test user."""
    def _headers(user) -> dict[str, str]:
        token = create_token_for_user(str(user.id), user.email, user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers
