"""
Test Suite Configuration
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from store_admin.analytics.schemas import (
    CustomerRecord,
    OrderRecord,
    ProductRecord,
)
from store_admin.database.connection import get_db_dependency
from store_admin.database.models import Base, Order, OrderItem, Product, UserProfile
from store_admin.main import app
from store_admin.serving import cache


@pytest.fixture(autouse=True)
def no_redis():
    """Every test starts without a cache client"""
    cache.set_redis(None)
    yield
    cache.set_redis(None)


@pytest.fixture
async def test_engine():
    """In-memory database shared by every connection of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session rolled back after the test"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
async def seeded_db(test_db: AsyncSession, now: datetime) -> AsyncSession:
    """
    Two customers, three products and four orders.

    ORD-004 is older than 30 days; ORD-003 is cancelled.
    """
    alice = UserProfile(id="cust-1", full_name="Alice Johnson", phone="555-0101", created_at=now - timedelta(days=90))
    bob = UserProfile(id="cust-2", full_name="Bob Smith", phone="555-0202", created_at=now - timedelta(days=60))

    submariner = Product(
        id="prod-1", name="Submariner", price=Decimal("9000.00"), category="Luxury Watches",
        brand="Rolex", stock_quantity=3, created_at=now - timedelta(days=100),
    )
    seamaster = Product(
        id="prod-2", name="Seamaster", price=Decimal("5000.00"), category="Diving Watches",
        brand="Omega", stock_quantity=5, created_at=now - timedelta(days=99),
    )
    forerunner = Product(
        id="prod-3", name="Forerunner", price=Decimal("400.00"), category="Smartwatches",
        brand="Garmin", description="GPS running watch", stock_quantity=40,
        created_at=now - timedelta(days=98),
    )
    test_db.add_all([alice, bob, submariner, seamaster, forerunner])

    orders = [
        Order(
            id="ord-1", order_number="ORD-001", user_id="cust-1", status="delivered",
            total=Decimal("9400.00"), created_at=now - timedelta(days=2),
            items=[
                OrderItem(product_id="prod-1", product_name="Submariner", product_price=Decimal("9000.00"),
                          quantity=1, total_price=Decimal("9000.00"), created_at=now - timedelta(days=2)),
                OrderItem(product_id="prod-3", product_name="Forerunner", product_price=Decimal("400.00"),
                          quantity=1, total_price=Decimal("400.00"), created_at=now - timedelta(days=2)),
            ],
        ),
        Order(
            id="ord-2", order_number="ORD-002", user_id="cust-2", status="pending",
            total=Decimal("5000.00"), created_at=now - timedelta(days=1),
            items=[
                OrderItem(product_id="prod-2", product_name="Seamaster", product_price=Decimal("5000.00"),
                          quantity=1, total_price=Decimal("5000.00"), created_at=now - timedelta(days=1)),
            ],
        ),
        Order(
            id="ord-3", order_number="ORD-003", user_id="cust-1", status="cancelled",
            total=Decimal("800.00"), created_at=now - timedelta(days=5),
            items=[
                OrderItem(product_id="prod-3", product_name="Forerunner", product_price=Decimal("400.00"),
                          quantity=2, total_price=Decimal("800.00"), created_at=now - timedelta(days=5)),
            ],
        ),
        Order(
            id="ord-4", order_number="ORD-004", user_id="cust-2", status="shipped",
            total=Decimal("400.00"), created_at=now - timedelta(days=45),
            items=[
                OrderItem(product_id="prod-3", product_name="Forerunner", product_price=Decimal("400.00"),
                          quantity=1, total_price=Decimal("400.00"), created_at=now - timedelta(days=45)),
            ],
        ),
    ]
    test_db.add_all(orders)
    await test_db.flush()
    test_db.expunge_all()
    return test_db


@pytest.fixture
async def client(seeded_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the seeded session"""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield seeded_db

    app.dependency_overrides[get_db_dependency] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# In-memory records for the aggregator
# =============================================================================

D1 = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
D2 = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def scenario_orders() -> list:
    """Two orders on D1 and one on D2"""
    return [
        OrderRecord(id="o1", total=100, created_at=D1, status="pending"),
        OrderRecord(id="o2", total=200, created_at=D1, status="delivered"),
        OrderRecord(id="o3", total=50, created_at=D2, status="pending"),
    ]


@pytest.fixture
def catalog() -> list:
    return [
        ProductRecord(id=f"p{i}", name=f"Watch {i}", price=100 * i)
        for i in range(1, 8)
    ]


@pytest.fixture
def customers() -> list:
    return [
        CustomerRecord(id="c1", full_name="Alice Johnson", created_at=D1),
        CustomerRecord(id="c2", full_name=None, created_at=D2),
    ]
