"""Money / rounding helpers.

Centralized so pricing, conversion, and API output use identical rounding and
display semantics. Arithmetic elsewhere stays in full Decimal precision; only
display goes through `format_amount`.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")


def to_decimal(value: Any) -> Decimal:
    """Decimal from int/float/str via str() so floats keep their printed value."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"not a number: {value!r}")
    return Decimal(str(value).strip())


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def display_places(value: Decimal) -> Decimal:
    # 0 < x < 1 gets 4 digits so small conversions do not show as 0.00
    if Decimal("0") < value < Decimal("1"):
        return FOUR_PLACES
    return TWO_PLACES


def format_amount(value: Any, symbol: str) -> str:
    amount = to_decimal(value)
    shown = amount.quantize(display_places(amount), rounding=ROUND_HALF_UP)
    return f"{symbol} {shown}"
