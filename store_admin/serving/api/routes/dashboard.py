"""
Dashboard API Endpoint

Headline counts and recent activity for the admin home page.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from store_admin.analytics.schemas import ZERO, Money
from store_admin.config import get_settings
from store_admin.database.connection import get_db_dependency
from store_admin.database.models import Order, OrderStatus, Product, UserProfile
from store_admin.serving.api.routes.orders import OrderSummary
from store_admin.serving.api.routes.products import ProductOut
from store_admin.serving.cache import dashboard_cache

router = APIRouter()


class RecentOrder(OrderSummary):
    customer_name: Optional[str] = None
    item_count: int = 0


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: Money
    total_products: int
    total_customers: int
    recent_orders: List[RecentOrder]
    recent_products: List[ProductOut]


async def _count(db: AsyncSession, column) -> int:
    return (await db.execute(select(func.count(column)))).scalar() or 0


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    db: AsyncSession = Depends(get_db_dependency),
) -> DashboardStats:
    """
    Totals and the most recent orders and products.

    Revenue excludes cancelled orders.
    """
    cached = await dashboard_cache.get("stats")
    if cached:
        return DashboardStats(**cached)

    limit = get_settings().analytics.recent_limit

    total_revenue = (await db.execute(
        select(func.sum(Order.total)).where(Order.status != OrderStatus.CANCELLED.value)
    )).scalar() or ZERO

    orders_result = await db.execute(
        select(Order)
        .options(selectinload(Order.user), selectinload(Order.items))
        .order_by(Order.created_at.desc())
        .limit(limit)
    )
    recent_orders = [
        RecentOrder(
            **OrderSummary.model_validate(order).model_dump(),
            customer_name=order.user.full_name if order.user else None,
            item_count=len(order.items),
        )
        for order in orders_result.scalars().all()
    ]

    products_result = await db.execute(
        select(Product).order_by(Product.created_at.desc()).limit(limit)
    )

    stats = DashboardStats(
        total_orders=await _count(db, Order.id),
        total_revenue=total_revenue,
        total_products=await _count(db, Product.id),
        total_customers=await _count(db, UserProfile.id),
        recent_orders=recent_orders,
        recent_products=[ProductOut.model_validate(p) for p in products_result.scalars().all()],
    )

    await dashboard_cache.set("stats", stats.model_dump(mode="json"))
    return stats
