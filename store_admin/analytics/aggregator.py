"""
Analytics Aggregator

Pure transformations from raw order, product, and customer records into
the series the dashboard charts. Nothing here performs I/O or raises on
well-typed input: missing collections are empty, missing amounts are zero.
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

import structlog

from store_admin.config import get_settings
from store_admin.database.models import OrderStatus
from .schemas import (
    ZERO,
    ChartData,
    CustomerRecord,
    CustomerStats,
    DailyRevenuePoint,
    MonthlyRevenuePoint,
    OrderItemRecord,
    OrderRecord,
    OrderStats,
    ProductPerformancePoint,
    ProductRecord,
    StatusDistributionPoint,
    Summary,
)

logger = structlog.get_logger(__name__)

UNKNOWN_STATUS = "unknown"


def _reporting_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().analytics.timezone)


def order_date(created_at: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar date of a timestamp in the reporting timezone. Naive values are UTC."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(tz or _reporting_zone()).date()


def sum_revenue(orders: Iterable[OrderRecord]) -> Decimal:
    return sum((order.total for order in orders), ZERO)


def build_daily_revenue(
    orders: Optional[Sequence[OrderRecord]],
    tz: Optional[ZoneInfo] = None,
) -> List[DailyRevenuePoint]:
    """
    Revenue and order count per calendar date, oldest date first.

    Orders without a timestamp share one bucket with no date, placed last,
    so the series always accounts for every order.
    """
    tz = tz or _reporting_zone()
    revenue: Dict[Optional[date], Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[Optional[date], int] = defaultdict(int)

    for order in orders or []:
        day = order_date(order.created_at, tz) if order.created_at is not None else None
        revenue[day] += order.total
        counts[day] += 1

    return [
        DailyRevenuePoint(date=day, revenue=revenue[day], orders=counts[day])
        for day in sorted(revenue, key=lambda d: (d is None, d or date.min))
    ]


def build_status_distribution(orders: Optional[Sequence[OrderRecord]]) -> List[StatusDistributionPoint]:
    """
    Order count per status value, in the order each status is first seen.

    Statuses outside the known set are counted as-is.
    """
    tally: Dict[str, int] = {}
    for order in orders or []:
        status = order.status or UNKNOWN_STATUS
        tally[status] = tally.get(status, 0) + 1

    return [
        StatusDistributionPoint(name=status[:1].upper() + status[1:], value=count)
        for status, count in tally.items()
    ]


def _first_item_for(order: OrderRecord, product_id: str) -> Optional[OrderItemRecord]:
    for item in order.items:
        if item.product_id == product_id:
            return item
    return None


def build_product_performance(
    orders: Optional[Sequence[OrderRecord]],
    products: Optional[Sequence[ProductRecord]],
) -> List[ProductPerformancePoint]:
    """
    Units sold and revenue per product, in catalog order.

    Only the first line item of an order that references a product is
    counted for that product.
    """
    orders = orders or []
    performance = []

    for product in products or []:
        sales = 0
        revenue = ZERO
        for order in orders:
            item = _first_item_for(order, product.id)
            if item is None:
                continue
            sales += item.quantity
            revenue += item.total_price

        performance.append(
            ProductPerformancePoint(
                id=product.id,
                name=product.name,
                price=product.price,
                sales=sales,
                revenue=revenue,
            )
        )

    return performance


def build_top_products(
    orders: Optional[Sequence[OrderRecord]],
    products: Optional[Sequence[ProductRecord]],
    limit: Optional[int] = None,
) -> List[ProductPerformancePoint]:
    """Highest-revenue products with non-zero revenue; ties keep catalog order."""
    if limit is None:
        limit = get_settings().analytics.top_products_limit

    selling = [p for p in build_product_performance(orders, products) if p.revenue > 0]
    selling.sort(key=lambda p: p.revenue, reverse=True)
    return selling[:limit]


def build_summary(
    orders: Optional[Sequence[OrderRecord]],
    customers: Optional[Sequence[CustomerRecord]],
) -> Summary:
    orders = orders or []
    total_revenue = sum_revenue(orders)
    total_orders = len(orders)
    avg_order_value = total_revenue / total_orders if total_orders > 0 else ZERO

    return Summary(
        total_revenue=total_revenue,
        total_orders=total_orders,
        total_customers=len(customers or []),
        avg_order_value=avg_order_value,
    )


def process_chart_data(
    orders: Optional[Sequence[OrderRecord]] = None,
    products: Optional[Sequence[ProductRecord]] = None,
    customers: Optional[Sequence[CustomerRecord]] = None,
) -> ChartData:
    """
    Derive all analytics series from one fetch.

    Args:
        orders: Orders within the requested range, with line items
        products: Full product catalog
        customers: All customer profiles

    Returns:
        ChartData with daily revenue, status distribution, top products and summary
    """
    orders = orders or []
    products = products or []
    customers = customers or []

    chart = ChartData(
        daily_revenue_data=build_daily_revenue(orders),
        status_distribution=build_status_distribution(orders),
        top_products=build_top_products(orders, products),
        summary=build_summary(orders, customers),
    )

    logger.debug(
        "Chart data processed",
        orders=len(orders),
        products=len(products),
        customers=len(customers),
        days=len(chart.daily_revenue_data),
        top_products=len(chart.top_products),
    )
    return chart


def _shift_month(year: int, month: int, offset: int) -> tuple:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def build_monthly_revenue(
    orders: Optional[Sequence[OrderRecord]],
    months: Optional[int] = None,
    today: Optional[date] = None,
    tz: Optional[ZoneInfo] = None,
) -> List[MonthlyRevenuePoint]:
    """
    Revenue for each of the trailing calendar months, oldest first.

    The window ends with the month containing ``today``; months without
    orders are reported with zero revenue.
    """
    tz = tz or _reporting_zone()
    if months is None:
        months = get_settings().analytics.monthly_window
    if today is None:
        today = datetime.now(tz).date()

    buckets: Dict[tuple, Decimal] = {}
    for offset in range(-(months - 1), 1):
        buckets[_shift_month(today.year, today.month, offset)] = ZERO

    for order in orders or []:
        if order.created_at is None:
            continue
        day = order_date(order.created_at, tz)
        key = (day.year, day.month)
        if key in buckets:
            buckets[key] += order.total

    return [
        MonthlyRevenuePoint(month=date(year, month, 1).strftime("%b %Y"), revenue=revenue)
        for (year, month), revenue in buckets.items()
    ]


def build_order_stats(orders: Optional[Sequence[OrderRecord]]) -> OrderStats:
    """Counts per known fulfillment status plus revenue over all orders."""
    orders = orders or []
    counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        if order.status in counts:
            counts[order.status] += 1

    return OrderStats(
        total=len(orders),
        total_revenue=sum_revenue(orders),
        **counts,
    )


def build_customer_stats(orders: Optional[Sequence[OrderRecord]]) -> Dict[str, CustomerStats]:
    """Order count and total spend per customer id. Orders without a customer are skipped."""
    stats: Dict[str, CustomerStats] = {}
    for order in orders or []:
        if order.user_id is None:
            continue
        entry = stats.get(order.user_id)
        if entry is None:
            entry = stats[order.user_id] = CustomerStats(order_count=0, total_spent=ZERO)
        entry.order_count += 1
        entry.total_spent += order.total
    return stats
