"""
Analytics Data Models

Input records read from the store database and the chart-ready series
derived from them. Monetary values are Decimal internally and serialize
to JSON numbers.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

ZERO = Decimal("0")

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def coerce_amount(value: Any) -> Decimal:
    """Parse a monetary value, falling back to zero for missing or malformed input."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def coerce_quantity(value: Any) -> int:
    """Parse a line item quantity, falling back to zero."""
    amount = coerce_amount(value)
    return int(amount)


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


# =============================================================================
# INPUT RECORDS
# =============================================================================

class ProductRecord(_Record):
    """Catalog product as read for analytics"""
    id: str
    name: Optional[str] = None
    price: Money = ZERO
    category: Optional[str] = None
    brand: Optional[str] = None
    is_active: bool = True

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Decimal:
        return coerce_amount(v)


class OrderItemRecord(_Record):
    """Line item of an order"""
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int = 0
    product_price: Money = ZERO
    total_price: Money = ZERO
    product: Optional[ProductRecord] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> int:
        return coerce_quantity(v)

    @field_validator("product_price", "total_price", mode="before")
    @classmethod
    def _amounts(cls, v: Any) -> Decimal:
        return coerce_amount(v)


class OrderRecord(_Record):
    """Order with its line items"""
    id: str
    order_number: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[str] = None
    total: Money = ZERO
    created_at: Optional[datetime] = None
    items: List[OrderItemRecord] = Field(default_factory=list)

    @field_validator("total", mode="before")
    @classmethod
    def _total(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, v: Any) -> Any:
        return [] if v is None else v


class CustomerRecord(_Record):
    """Customer profile"""
    id: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None


class AnalyticsData(BaseModel):
    """The three collections an analytics call aggregates"""
    orders: List[OrderRecord] = Field(default_factory=list)
    products: List[ProductRecord] = Field(default_factory=list)
    customers: List[CustomerRecord] = Field(default_factory=list)


# =============================================================================
# DERIVED SERIES
# =============================================================================

class DailyRevenuePoint(BaseModel):
    """Revenue for one calendar day; ``date`` is None for orders without a timestamp"""
    date: Optional[date]
    revenue: Money
    orders: int


class StatusDistributionPoint(BaseModel):
    name: str
    value: int


class ProductPerformancePoint(BaseModel):
    id: str
    name: Optional[str]
    price: Money
    sales: int
    revenue: Money


class Summary(BaseModel):
    total_revenue: Money
    total_orders: int
    total_customers: int
    avg_order_value: Money


class ChartData(BaseModel):
    """Everything the analytics page charts"""
    daily_revenue_data: List[DailyRevenuePoint]
    status_distribution: List[StatusDistributionPoint]
    top_products: List[ProductPerformancePoint]
    summary: Summary


class MonthlyRevenuePoint(BaseModel):
    month: str
    revenue: Money


class OrderStats(BaseModel):
    """Order counts per fulfillment status"""
    total: int
    pending: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    total_revenue: Money


class CustomerStats(BaseModel):
    order_count: int
    total_spent: Money
