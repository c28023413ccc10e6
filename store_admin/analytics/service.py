"""
Analytics Data Fetch

Range-filtered reads against the store database that feed the
aggregator. Rows are converted to plain records before they leave the
session so aggregation never touches the ORM.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from store_admin.database.models import Order, OrderItem, Product, UserProfile
from .schemas import AnalyticsData, CustomerRecord, OrderRecord, ProductRecord

logger = structlog.get_logger(__name__)


def range_start(range_days: int, now: Optional[datetime] = None) -> datetime:
    """Start of a trailing window of ``range_days`` days ending at ``now``."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=range_days)


async def fetch_orders(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    with_items: bool = True,
) -> List[OrderRecord]:
    """
    Orders created in ``[start, end)``, oldest first.

    Either bound may be omitted. Line items and their products are loaded
    unless ``with_items`` is false, in which case records carry no items.
    """
    query = select(Order)
    if with_items:
        query = query.options(selectinload(Order.items).selectinload(OrderItem.product))
    if start is not None:
        query = query.where(Order.created_at >= start)
    if end is not None:
        query = query.where(Order.created_at < end)
    query = query.order_by(Order.created_at.asc())

    result = await db.execute(query)
    orders = result.scalars().all()
    if not with_items:
        # items is unloaded here; touching it would trigger lazy IO outside the greenlet
        return [
            OrderRecord(
                id=order.id,
                order_number=order.order_number,
                user_id=order.user_id,
                status=order.status,
                total=order.total,
                created_at=order.created_at,
            )
            for order in orders
        ]
    return [OrderRecord.model_validate(order) for order in orders]


async def fetch_products(db: AsyncSession) -> List[ProductRecord]:
    result = await db.execute(select(Product).order_by(Product.created_at, Product.name))
    return [ProductRecord.model_validate(product) for product in result.scalars().all()]


async def fetch_customers(db: AsyncSession) -> List[CustomerRecord]:
    result = await db.execute(select(UserProfile))
    return [CustomerRecord.model_validate(profile) for profile in result.scalars().all()]


async def fetch_analytics_data(
    db: AsyncSession,
    range_days: int,
    now: Optional[datetime] = None,
) -> AnalyticsData:
    """
    Load everything one analytics view aggregates.

    Args:
        db: Open session
        range_days: Trailing number of days of orders to include
        now: End of the window, defaults to the current time

    Returns:
        Orders in range plus the full product catalog and customer list
    """
    start = range_start(range_days, now)

    orders = await fetch_orders(db, start=start)
    products = await fetch_products(db)
    customers = await fetch_customers(db)

    logger.info(
        "Analytics data fetched",
        range_days=range_days,
        start=start.isoformat(),
        orders=len(orders),
        products=len(products),
        customers=len(customers),
    )
    return AnalyticsData(orders=orders, products=products, customers=customers)
