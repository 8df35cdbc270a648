from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from pharmacart.models.constants import BASE_CURRENCY, SUPPORTED_CURRENCIES
from pharmacart.models.rates import RateTable
from pharmacart.services.money import to_decimal

"""Base-currency conversion helpers.

Single place that decides which multiplier applies to a currency selection.
An unknown code converts at 1 (base-equivalent) instead of failing, and shows
the base symbol.
"""


@dataclass(frozen=True)
class ResolvedCurrency:
    code: str
    symbol: str
    rate: Decimal
    known: bool


def resolve_currency(code: str, table: RateTable) -> ResolvedCurrency:
    code = (code or "").strip().upper()
    entry = table.get(code)
    if entry is None:
        base_symbol = SUPPORTED_CURRENCIES[BASE_CURRENCY].symbol
        return ResolvedCurrency(code=code, symbol=base_symbol, rate=Decimal("1"), known=False)
    return ResolvedCurrency(
        code=entry.code, symbol=entry.symbol, rate=entry.units_per_base, known=True
    )


def convert(amount: Any, code: str, table: RateTable) -> Decimal:
    """Base-currency amount expressed in `code`."""
    return to_decimal(amount) * resolve_currency(code, table).rate


def to_base(amount: Any, code: str, table: RateTable) -> Decimal:
    """Inverse of `convert`: an amount in `code` back to base currency."""
    return to_decimal(amount) / resolve_currency(code, table).rate
