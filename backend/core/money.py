"""Rounding and currency text helpers shared by the engine and the export."""

from __future__ import annotations

import math


def round_half_away(value: float, step: float = 1.0) -> float:
    """Round ``value`` to a multiple of ``step``, halves going away from zero.

    Non-finite values (NaN, +/-Infinity) are returned unchanged so that
    callers never have to guard the arithmetic that produced them.
    """
    if not math.isfinite(value):
        return value
    magnitude = math.floor(abs(value) / step + 0.5) * step
    if magnitude == 0:
        return 0.0
    return float(magnitude) if value > 0 else -float(magnitude)


def round_to_thousand(value: float) -> float:
    return round_half_away(value, 1000.0)


def _plain_number(value: float) -> str:
    # Up to three fractional digits, trailing zeros dropped: 950 -> "950", 12.5 -> "12.5"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


def format_currency(value: float) -> str:
    """Abbreviated dollars for tables and charts: $1.2M, $340K, $950."""
    if value >= 1_000_000:
        return f"${round_half_away(value / 100_000) / 10:.1f}M"
    if value >= 1_000:
        return f"${round_half_away(value / 1_000):.0f}K"
    return f"${_plain_number(value)}"


def format_currency_detailed(value: float) -> str:
    """Whole-dollar USD text with thousands separators, e.g. -$1,234."""
    if not math.isfinite(value):
        return f"${value}"
    rounded = round_half_away(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"


__all__ = [
    "round_half_away",
    "round_to_thousand",
    "format_currency",
    "format_currency_detailed",
]
