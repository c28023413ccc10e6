"""
Customers API Endpoints

Customer profiles with per-customer order statistics.
"""

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from store_admin.analytics import build_customer_stats
from store_admin.analytics.schemas import ZERO, CustomerStats
from store_admin.analytics.service import fetch_orders
from store_admin.database.connection import get_db_dependency
from store_admin.database.models import Order, UserProfile
from store_admin.exceptions import NotFoundError
from store_admin.serving.api.routes.orders import OrderSummary
from store_admin.serving.cache import customers_cache

router = APIRouter()


class CustomerOut(BaseModel):
    """Customer profile response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: Optional[str]
    phone: Optional[str]
    avatar_url: Optional[str]
    role: str
    created_at: Optional[datetime]


class CustomerDetail(CustomerOut):
    stats: CustomerStats
    orders: List[OrderSummary]


@router.get("", response_model=List[CustomerOut])
async def list_customers(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> List[CustomerOut]:
    """List customers, newest first. ``search`` matches name or phone."""
    query = select(UserProfile)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(UserProfile.full_name.ilike(pattern), UserProfile.phone.ilike(pattern)))

    result = await db.execute(query.order_by(UserProfile.created_at.desc()))
    return [CustomerOut.model_validate(c) for c in result.scalars().all()]


@router.get("/stats", response_model=Dict[str, CustomerStats])
async def get_customer_stats(
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, CustomerStats]:
    """Order count and total spend keyed by customer id."""
    cached = await customers_cache.get("stats")
    if cached is not None:
        return {user_id: CustomerStats(**entry) for user_id, entry in cached.items()}

    stats = build_customer_stats(await fetch_orders(db, with_items=False))

    await customers_cache.set(
        "stats", {user_id: entry.model_dump(mode="json") for user_id, entry in stats.items()}
    )
    return stats


@router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> CustomerDetail:
    """Customer profile with their orders, newest first."""
    profile = await db.get(UserProfile, customer_id)
    if profile is None:
        raise NotFoundError("Customer", customer_id)

    result = await db.execute(
        select(Order).where(Order.user_id == customer_id).order_by(Order.created_at.desc())
    )
    orders = [OrderSummary.model_validate(o) for o in result.scalars().all()]
    stats = CustomerStats(
        order_count=len(orders),
        total_spent=sum((o.total for o in orders), ZERO),
    )

    return CustomerDetail(
        **CustomerOut.model_validate(profile).model_dump(),
        stats=stats,
        orders=orders,
    )
