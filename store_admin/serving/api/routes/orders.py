"""
Orders API Endpoints

Order list, fulfillment statistics, order detail and status/notes updates.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from store_admin.analytics import build_order_stats
from store_admin.analytics.schemas import Money, OrderStats
from store_admin.analytics.service import fetch_orders
from store_admin.database.connection import get_db_dependency
from store_admin.database.models import Order, OrderItem, OrderStatus
from store_admin.exceptions import NotFoundError
from store_admin.serving.cache import (
    analytics_cache,
    customers_cache,
    dashboard_cache,
    invalidate,
    orders_cache,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class OrderSummary(BaseModel):
    """Order row as listed"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    user_id: Optional[str]
    status: str
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    notes: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class OrderProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    image_url: Optional[str]
    category: Optional[str]
    brand: Optional[str]


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: Optional[str]
    product_name: Optional[str]
    product_price: Money
    quantity: int
    total_price: Money
    product: Optional[OrderProduct]


class OrderCustomer(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: Optional[str]
    phone: Optional[str]
    avatar_url: Optional[str]


class OrderDetail(OrderSummary):
    """Order with customer and line items"""
    user: Optional[OrderCustomer]
    items: List[OrderItemOut]


class OrderUpdate(BaseModel):
    """Fields an admin may change on an order"""
    status: Optional[OrderStatus] = None
    notes: Optional[str] = None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=List[OrderSummary])
async def list_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> List[OrderSummary]:
    """
    List orders, newest first.

    ``search`` matches the order number or customer id; ``status`` filters
    by fulfillment status unless it is ``all``.
    """
    query = select(Order)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Order.order_number.ilike(pattern), Order.user_id.ilike(pattern)))
    if status and status != "all":
        query = query.where(Order.status == status)

    result = await db.execute(query.order_by(Order.created_at.desc()))
    return [OrderSummary.model_validate(o) for o in result.scalars().all()]


@router.get("/stats", response_model=OrderStats)
async def get_order_stats(
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderStats:
    """Order counts per status and revenue across all orders."""
    cached = await orders_cache.get("stats")
    if cached:
        return OrderStats(**cached)

    stats = build_order_stats(await fetch_orders(db, with_items=False))

    await orders_cache.set("stats", stats.model_dump(mode="json"))
    return stats


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderDetail:
    """Order detail with customer, line items and their products."""
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.user),
            selectinload(Order.items).selectinload(OrderItem.product),
        )
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order", order_id)

    return OrderDetail.model_validate(order)


@router.patch("/{order_id}", response_model=OrderSummary)
async def update_order(
    order_id: str,
    update: OrderUpdate,
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderSummary:
    """Change an order's status and/or notes."""
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="Nothing to update")

    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)

    if "status" in changes:
        if update.status is None:
            raise HTTPException(status_code=400, detail="Status cannot be empty")
        order.status = update.status.value
    if "notes" in changes:
        order.notes = update.notes

    await db.flush()
    await db.refresh(order)

    await db.commit()
    await invalidate(orders_cache, analytics_cache, dashboard_cache, customers_cache)
    logger.info("Order updated", order_id=order_id, fields=sorted(changes))
    return OrderSummary.model_validate(order)
