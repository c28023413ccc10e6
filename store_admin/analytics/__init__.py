"""
Analytics Module
"""
from .aggregator import (
    build_customer_stats,
    build_monthly_revenue,
    build_order_stats,
    process_chart_data,
)
from .formatting import calculate_growth_rate, format_currency, format_percentage
from .schemas import AnalyticsData, ChartData
from .service import fetch_analytics_data

__all__ = [
    "AnalyticsData",
    "ChartData",
    "build_customer_stats",
    "build_monthly_revenue",
    "build_order_stats",
    "calculate_growth_rate",
    "fetch_analytics_data",
    "format_currency",
    "format_percentage",
    "process_chart_data",
]
