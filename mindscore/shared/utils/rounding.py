"""Presentation rounding.

Both helpers round the exact binary value of the float, not its shortest
decimal repr. Scores and percentiles are rounded half-up, matching how the
front end has always displayed them. Per-country averages are rounded
half-to-even, matching the aggregate the ratings store used to report.
"""
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Optional


def _quantize(value: float, digits: int, rounding: str) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=rounding))


def round_half_up(value: float, digits: int) -> float:
    """Round ``value`` to ``digits`` decimal places, ties away from zero.

    Example:
        >>> round_half_up(0.125, 2)
        0.13
    """
    return _quantize(value, digits, ROUND_HALF_UP)


def round_half_even(value: float, digits: int) -> float:
    """Round ``value`` to ``digits`` decimal places, ties to the even digit.

    Example:
        >>> round_half_even(0.125, 2)
        0.12
    """
    return _quantize(value, digits, ROUND_HALF_EVEN)


def round_optional(value: Optional[float], digits: int) -> Optional[float]:
    if value is None:
        return None
    return round_half_up(value, digits)
