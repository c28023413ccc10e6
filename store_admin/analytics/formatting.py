"""
Display formatting and period-over-period growth for dashboard figures.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_CENTS = Decimal("0.01")
_TENTHS = Decimal("0.1")


def calculate_growth_rate(current: Number, previous: Number) -> float:
    """
    Percentage change from ``previous`` to ``current``.

    A zero baseline yields 100 when anything was gained and 0 otherwise,
    so the result is always finite.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(str(current)) - Decimal(str(previous))) / Decimal(str(previous)) * 100)


def format_currency(amount: Number) -> str:
    """US dollar string with thousands separators, e.g. ``-$1,234.50``."""
    cents = Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents):,.2f}"


def format_percentage(value: Number) -> str:
    """One-decimal percentage with an explicit ``+`` for non-negative values."""
    tenths = Decimal(str(value)).quantize(_TENTHS, rounding=ROUND_HALF_UP)
    if value >= 0:
        return f"+{tenths.copy_abs()}%"
    return f"{tenths}%"
