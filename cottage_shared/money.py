"""Money helpers. Amounts travel as integer minor units (cents)."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: Union[int, float, str, Decimal]) -> int:
    """
    Convert a major-unit amount to minor units, rounding half up.

    Floats go through str() first so 12.34 becomes 1234, not 1233.
    """
    if isinstance(amount, bool):
        raise TypeError("amount must be a number")
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return int((value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_major(amount_minor: int) -> str:
    """1234 -> '12.34'"""
    return f"{Decimal(amount_minor) / MINOR_UNITS_PER_MAJOR:.2f}"
