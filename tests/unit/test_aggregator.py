"""
Unit Tests - Analytics Aggregation
"""
import itertools
from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from store_admin.analytics.aggregator import (
    build_customer_stats,
    build_daily_revenue,
    build_monthly_revenue,
    build_order_stats,
    build_product_performance,
    build_status_distribution,
    build_top_products,
    process_chart_data,
)
from store_admin.analytics.schemas import OrderItemRecord, OrderRecord, ProductRecord


def item(product_id, quantity, total_price):
    return OrderItemRecord(product_id=product_id, quantity=quantity, total_price=total_price)


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 3, day, hour, 0, tzinfo=timezone.utc)


class TestProcessChartData:
    """Tests for process_chart_data"""

    def test_three_order_scenario(self, scenario_orders, customers):
        """Two orders on one day and one on the next"""
        chart = process_chart_data(scenario_orders, [], customers)

        assert [(p.date, p.revenue, p.orders) for p in chart.daily_revenue_data] == [
            (date(2026, 3, 1), Decimal("300"), 2),
            (date(2026, 3, 2), Decimal("50"), 1),
        ]
        assert [(p.name, p.value) for p in chart.status_distribution] == [
            ("Pending", 2),
            ("Delivered", 1),
        ]
        assert chart.summary.total_revenue == Decimal("350")
        assert chart.summary.total_orders == 3
        assert chart.summary.total_customers == 2
        assert chart.summary.avg_order_value == Decimal("350") / 3
        assert round(chart.summary.avg_order_value, 2) == Decimal("116.67")

    def test_empty_inputs(self):
        """Missing collections produce empty series and a zero summary"""
        chart = process_chart_data(None, None, None)

        assert chart.daily_revenue_data == []
        assert chart.status_distribution == []
        assert chart.top_products == []
        assert chart.summary.total_revenue == 0
        assert chart.summary.total_orders == 0
        assert chart.summary.total_customers == 0
        assert chart.summary.avg_order_value == 0

    def test_repeated_runs_are_identical(self, scenario_orders, catalog, customers):
        first = process_chart_data(scenario_orders, catalog, customers)
        second = process_chart_data(scenario_orders, catalog, customers)

        assert first.model_dump() == second.model_dump()

    def test_json_output_uses_numbers(self, scenario_orders):
        payload = process_chart_data(scenario_orders).model_dump(mode="json")

        assert payload["summary"]["total_revenue"] == 350.0
        assert payload["daily_revenue_data"][0]["date"] == "2026-03-01"


class TestDailyRevenue:
    """Tests for the daily revenue series"""

    def test_sums_match_orders(self, scenario_orders):
        points = build_daily_revenue(scenario_orders)

        assert sum(p.revenue for p in points) == sum(o.total for o in scenario_orders)
        assert sum(p.orders for p in points) == len(scenario_orders)

    def test_sorted_for_every_input_order(self):
        orders = [
            OrderRecord(id="a", total=10, created_at=at(9)),
            OrderRecord(id="b", total=20, created_at=at(1)),
            OrderRecord(id="c", total=30, created_at=at(20)),
            OrderRecord(id="d", total=40, created_at=at(1, 23)),
        ]
        expected = build_daily_revenue(orders)

        assert [p.date for p in expected] == [date(2026, 3, 1), date(2026, 3, 9), date(2026, 3, 20)]
        for permutation in itertools.permutations(orders):
            assert build_daily_revenue(list(permutation)) == expected

    def test_missing_and_malformed_totals_count_as_zero(self):
        orders = [
            OrderRecord(id="a", total=None, created_at=at(1)),
            OrderRecord(id="b", total="not a number", created_at=at(1)),
            OrderRecord(id="c", total="12.50", created_at=at(1)),
        ]

        [point] = build_daily_revenue(orders)

        assert point.revenue == Decimal("12.50")
        assert point.orders == 3

    def test_buckets_by_reporting_timezone(self):
        """02:00 UTC on March 1st is still February 28th in New York"""
        orders = [OrderRecord(id="a", total=5, created_at=datetime(2026, 3, 1, 2, 0, tzinfo=timezone.utc))]

        [point] = build_daily_revenue(orders, tz=ZoneInfo("America/New_York"))

        assert point.date == date(2026, 2, 28)

    def test_naive_timestamps_are_utc(self):
        orders = [OrderRecord(id="a", total=5, created_at=datetime(2026, 3, 1, 23, 30))]

        [point] = build_daily_revenue(orders, tz=ZoneInfo("UTC"))

        assert point.date == date(2026, 3, 1)

    def test_orders_without_timestamp_are_counted_last(self):
        orders = [OrderRecord(id="a", total=10), OrderRecord(id="b", total=5, created_at=at(1))]

        points = build_daily_revenue(orders)

        assert [(p.date, p.revenue, p.orders) for p in points] == [
            (date(2026, 3, 1), Decimal("5"), 1),
            (None, Decimal("10"), 1),
        ]
        assert sum(p.orders for p in points) == len(orders)
        assert sum(p.revenue for p in points) == Decimal("15")


class TestStatusDistribution:
    """Tests for the status distribution"""

    def test_counts_sum_to_order_count(self, scenario_orders):
        points = build_status_distribution(scenario_orders)

        assert sum(p.value for p in points) == len(scenario_orders)

    def test_first_seen_order_and_unknown_statuses(self):
        orders = [
            OrderRecord(id="a", status="shipped"),
            OrderRecord(id="b", status="on_hold"),
            OrderRecord(id="c", status="shipped"),
            OrderRecord(id="d", status=None),
        ]

        points = build_status_distribution(orders)

        assert [(p.name, p.value) for p in points] == [
            ("Shipped", 2),
            ("On_hold", 1),
            ("Unknown", 1),
        ]


class TestTopProducts:
    """Tests for product performance and top products"""

    def test_at_most_five_strictly_descending(self, catalog):
        orders = [
            OrderRecord(id=f"o{i}", items=[item(f"p{i}", 1, 10 * i)])
            for i in range(1, 8)
        ]

        top = build_top_products(orders, catalog)

        assert len(top) == 5
        assert [p.id for p in top] == ["p7", "p6", "p5", "p4", "p3"]
        revenues = [p.revenue for p in top]
        assert all(a > b for a, b in zip(revenues, revenues[1:]))

    def test_zero_revenue_products_are_dropped(self, catalog):
        orders = [
            OrderRecord(id="o1", items=[item("p1", 2, 50), item("p2", 1, 0)]),
        ]

        top = build_top_products(orders, catalog)

        assert [p.id for p in top] == ["p1"]
        assert all(p.revenue != 0 for p in top)

    def test_ties_keep_catalog_order(self, catalog):
        orders = [
            OrderRecord(id="o1", items=[item("p3", 1, 25), item("p2", 1, 25)]),
        ]

        top = build_top_products(orders, catalog)

        assert [p.id for p in top] == ["p2", "p3"]

    def test_sums_quantity_and_revenue_across_orders(self, catalog):
        orders = [
            OrderRecord(id="o1", items=[item("p1", 2, 200)]),
            OrderRecord(id="o2", items=[item("p1", 3, 300), item("p2", 1, 200)]),
        ]

        [first, second] = build_top_products(orders, catalog)

        assert (first.id, first.sales, first.revenue) == ("p1", 5, Decimal("500"))
        assert (first.name, first.price) == ("Watch 1", Decimal("100"))
        assert (second.id, second.sales, second.revenue) == ("p2", 1, Decimal("200"))

    def test_only_first_line_item_per_order_counts(self, catalog):
        orders = [
            OrderRecord(id="o1", items=[item("p1", 1, 100), item("p1", 4, 400)]),
        ]

        [point] = build_top_products(orders, catalog)

        assert point.sales == 1
        assert point.revenue == Decimal("100")

    def test_missing_item_fields_count_as_zero(self):
        products = [ProductRecord(id="p1", name="Watch")]
        orders = [
            OrderRecord(id="o1", items=[{"product_id": "p1", "quantity": None, "total_price": None}]),
            OrderRecord(id="o2", items=None),
        ]

        [point] = build_product_performance(orders, products)

        assert point.sales == 0
        assert point.revenue == 0

    def test_custom_limit(self, catalog):
        orders = [OrderRecord(id="o1", items=[item("p1", 1, 1), item("p2", 1, 2), item("p3", 1, 3)])]

        assert len(build_top_products(orders, catalog, limit=2)) == 2


class TestMonthlyRevenue:
    """Tests for the trailing monthly series"""

    def test_window_is_zero_filled_and_oldest_first(self):
        orders = [
            OrderRecord(id="a", total=100, created_at=datetime(2026, 3, 10, tzinfo=timezone.utc)),
            OrderRecord(id="b", total=50, created_at=datetime(2026, 1, 31, 23, tzinfo=timezone.utc)),
            OrderRecord(id="c", total=999, created_at=datetime(2025, 12, 31, tzinfo=timezone.utc)),
        ]

        points = build_monthly_revenue(orders, months=3, today=date(2026, 3, 15), tz=ZoneInfo("UTC"))

        assert [(p.month, p.revenue) for p in points] == [
            ("Jan 2026", Decimal("50")),
            ("Feb 2026", Decimal("0")),
            ("Mar 2026", Decimal("100")),
        ]

    def test_window_crosses_year_boundary(self):
        points = build_monthly_revenue([], months=12, today=date(2026, 2, 1), tz=ZoneInfo("UTC"))

        assert len(points) == 12
        assert points[0].month == "Mar 2025"
        assert points[-1].month == "Feb 2026"


class TestOrderAndCustomerStats:
    """Tests for order and customer statistics"""

    def test_order_stats(self):
        orders = [
            OrderRecord(id="a", status="pending", total=10),
            OrderRecord(id="b", status="pending", total=20),
            OrderRecord(id="c", status="cancelled", total=5),
            OrderRecord(id="d", status="on_hold", total=1),
        ]

        stats = build_order_stats(orders)

        assert stats.total == 4
        assert stats.pending == 2
        assert stats.cancelled == 1
        assert stats.processing == 0
        assert stats.total_revenue == Decimal("36")

    def test_customer_stats(self):
        orders = [
            OrderRecord(id="a", user_id="c1", total=10),
            OrderRecord(id="b", user_id="c2", total=20),
            OrderRecord(id="c", user_id="c1", total="5.5"),
            OrderRecord(id="d", user_id=None, total=100),
        ]

        stats = build_customer_stats(orders)

        assert set(stats) == {"c1", "c2"}
        assert stats["c1"].order_count == 2
        assert stats["c1"].total_spent == Decimal("15.5")
        assert stats["c2"].order_count == 1


@pytest.mark.parametrize("total", [0, "0", None, "", float("nan")])
def test_zero_like_totals(total):
    assert OrderRecord(id="x", total=total).total == 0
