"""
Small numeric helpers shared by the scoring, forecasting and KPI services.

Rounding is half-up (toward positive infinity on exact halves) rather than
Python's banker's rounding, so 69.5 rounds to 70 and -0.5 rounds to 0. Every
published figure in the engine goes through round_half_up.
"""

import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: float, ndigits: int = 0) -> Number:
    """
    Round half-up to ndigits decimal places.

    Returns an int when ndigits is 0, otherwise a float.

    Example:
        >>> round_half_up(69.5)
        70
        >>> round_half_up(12.25, 1)
        12.3
    """
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5)
    if ndigits == 0:
        return int(rounded)
    return rounded / factor


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound value to [lower, upper]."""
    return max(lower, min(upper, value))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or default when the denominator is not positive."""
    if denominator <= 0:
        return default
    return numerator / denominator


def format_amount(value: float) -> str:
    """
    Format a dollar figure with thousands separators.

    Whole amounts print without decimals, fractional ones keep up to two.

    Example:
        >>> format_amount(125000)
        '125,000'
        >>> format_amount(1234.5)
        '1,234.5'
    """
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def format_number(value: float) -> str:
    """Print a rounded metric without a trailing '.0' on whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "round_half_up",
    "clamp",
    "safe_ratio",
    "format_amount",
    "format_number",
]
