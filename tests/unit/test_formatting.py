"""
Unit Tests - Growth Rate and Display Formatting
"""
from decimal import Decimal

import pytest

from store_admin.analytics.formatting import (
    calculate_growth_rate,
    format_currency,
    format_percentage,
)


class TestGrowthRate:
    """Tests for calculate_growth_rate"""

    def test_zero_baseline_without_gain(self):
        assert calculate_growth_rate(0, 0) == 0

    def test_zero_baseline_with_gain(self):
        assert calculate_growth_rate(50, 0) == 100

    def test_relative_change(self):
        assert calculate_growth_rate(150, 100) == 50

    def test_decline(self):
        assert calculate_growth_rate(25, 100) == -75

    def test_decimal_inputs(self):
        assert calculate_growth_rate(Decimal("15200.00"), Decimal("400.00")) == 3700

    def test_returns_float(self):
        assert isinstance(calculate_growth_rate(Decimal("3"), Decimal("2")), float)


class TestFormatCurrency:
    """Tests for format_currency"""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "$0.00"),
            (5, "$5.00"),
            (1234.5, "$1,234.50"),
            (Decimal("1234567.891"), "$1,234,567.89"),
            (0.005, "$0.01"),
            (-1234.567, "-$1,234.57"),
        ],
    )
    def test_format(self, amount, expected):
        assert format_currency(amount) == expected


class TestFormatPercentage:
    """Tests for format_percentage"""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (12.345, "+12.3%"),
            (50, "+50.0%"),
            (0, "+0.0%"),
            (-0.0, "+0.0%"),
            (0.25, "+0.3%"),
            (-5, "-5.0%"),
            (-12.36, "-12.4%"),
        ],
    )
    def test_format(self, value, expected):
        assert format_percentage(value) == expected
