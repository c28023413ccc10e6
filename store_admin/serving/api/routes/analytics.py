"""
Analytics API Endpoints

Chart data for the analytics page over a trailing range of days.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from store_admin.analytics import (
    build_monthly_revenue,
    calculate_growth_rate,
    fetch_analytics_data,
    format_currency,
    format_percentage,
    process_chart_data,
)
from store_admin.analytics.aggregator import build_summary
from store_admin.analytics.schemas import ChartData, MonthlyRevenuePoint, Summary
from store_admin.analytics.service import fetch_customers, fetch_orders, range_start
from store_admin.config import get_settings
from store_admin.database.connection import get_db_dependency
from store_admin.serving.cache import analytics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)

settings = get_settings()


class AnalyticsOverview(BaseModel):
    """Summary for the range with change against the preceding range"""
    range_days: int
    summary: Summary
    revenue_growth: float
    orders_growth: float
    formatted: Dict[str, str]


def _resolve_range(range_days: Optional[int]) -> int:
    return range_days or settings.analytics.default_range_days


@router.get("", response_model=ChartData)
async def get_chart_data(
    range_days: Optional[int] = Query(None, alias="range", ge=1, le=settings.analytics.max_range_days),
    db: AsyncSession = Depends(get_db_dependency),
) -> ChartData:
    """
    Daily revenue, status distribution, top products and summary for the
    last ``range`` days.
    """
    range_days = _resolve_range(range_days)
    cache_key = f"chart:{range_days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        logger.debug("Returning cached chart data", range_days=range_days)
        return ChartData(**cached)

    data = await fetch_analytics_data(db, range_days)
    chart = process_chart_data(data.orders, data.products, data.customers)

    await analytics_cache.set(cache_key, chart.model_dump(mode="json"))
    return chart


@router.get("/overview", response_model=AnalyticsOverview)
async def get_overview(
    range_days: Optional[int] = Query(None, alias="range", ge=1, le=settings.analytics.max_range_days),
    db: AsyncSession = Depends(get_db_dependency),
) -> AnalyticsOverview:
    """
    Summary for the last ``range`` days with growth against the
    ``range`` days before it.
    """
    range_days = _resolve_range(range_days)
    cache_key = f"overview:{range_days}"
    cached = await analytics_cache.get(cache_key)
    if cached:
        return AnalyticsOverview(**cached)

    now = datetime.now(timezone.utc)
    start = range_start(range_days, now)
    previous_start = start - timedelta(days=range_days)

    current = await fetch_orders(db, start=start, with_items=False)
    previous = await fetch_orders(db, start=previous_start, end=start, with_items=False)
    customers = await fetch_customers(db)

    summary = build_summary(current, customers)
    previous_summary = build_summary(previous, customers)

    revenue_growth = calculate_growth_rate(summary.total_revenue, previous_summary.total_revenue)
    orders_growth = calculate_growth_rate(summary.total_orders, previous_summary.total_orders)

    overview = AnalyticsOverview(
        range_days=range_days,
        summary=summary,
        revenue_growth=revenue_growth,
        orders_growth=orders_growth,
        formatted={
            "total_revenue": format_currency(summary.total_revenue),
            "avg_order_value": format_currency(summary.avg_order_value),
            "revenue_growth": format_percentage(revenue_growth),
            "orders_growth": format_percentage(orders_growth),
        },
    )

    logger.info(
        "Analytics overview computed",
        range_days=range_days,
        revenue_growth=revenue_growth,
        orders_growth=orders_growth,
    )
    await analytics_cache.set(cache_key, overview.model_dump(mode="json"))
    return overview


@router.get("/monthly", response_model=List[MonthlyRevenuePoint])
async def get_monthly_revenue(
    db: AsyncSession = Depends(get_db_dependency),
) -> List[MonthlyRevenuePoint]:
    """Revenue for each of the trailing twelve calendar months, oldest first."""
    cached = await analytics_cache.get("monthly")
    if cached:
        return [MonthlyRevenuePoint(**point) for point in cached]

    months = settings.analytics.monthly_window
    # 31 days per month always reaches back past the first day of the window
    orders = await fetch_orders(db, start=range_start(31 * months), with_items=False)
    points = build_monthly_revenue(orders, months=months)

    await analytics_cache.set("monthly", [p.model_dump(mode="json") for p in points])
    return points
