from __future__ import annotations

"""Cart pricing.

`compute_totals` is a pure function of (cart, surcharge percent, currency,
rate table). It only reads the cart. All arithmetic is exact Decimal; rounding
happens only in the display strings produced by `format_amount`.

An unknown currency code is priced at rate 1 with the base symbol.
"""
from decimal import Decimal
from typing import Any, Iterable, List

from pharmacart.core.errors import InvalidSurchargeError
from pharmacart.models.cart import CartLine
from pharmacart.models.pricing import LineTotal, Totals
from pharmacart.models.rates import RateTable
from pharmacart.services.money import format_amount, to_decimal
from pharmacart.services.rates.conversion import resolve_currency

HUNDRED = Decimal("100")


def parse_surcharge(value: Any) -> Decimal:
    """Validate a surcharge percentage from user input (number or numeric string)."""
    try:
        pct = to_decimal(value)
    except (ArithmeticError, ValueError, TypeError) as e:
        raise InvalidSurchargeError(f"surcharge must be a number, got {value!r}") from e
    if not pct.is_finite() or pct < 0:
        raise InvalidSurchargeError(f"surcharge must be >= 0, got {value!r}")
    return pct


def base_subtotal(lines: Iterable[CartLine]) -> Decimal:
    return sum(
        (line.product.base_price * line.quantity for line in lines), Decimal("0")
    )


def compute_totals(
    cart: Iterable[CartLine],
    surcharge_percent: Any,
    currency: str,
    rate_table: RateTable,
) -> Totals:
    pct = to_decimal(surcharge_percent)
    if pct < 0:
        raise InvalidSurchargeError("surcharge must be >= 0")
    resolved = resolve_currency(currency, rate_table)
    rate = resolved.rate

    snapshot: List[CartLine] = list(cart)
    subtotal = base_subtotal(snapshot)
    surcharge = subtotal * (pct / HUNDRED)
    grand_total = subtotal + surcharge

    line_totals = []
    for line in snapshot:
        unit = line.product.base_price
        line_total = unit * line.quantity
        line_totals.append(
            LineTotal(
                product_id=line.product.id,
                name=line.product.name,
                quantity=line.quantity,
                base_unit_price=unit,
                base_line_total=line_total,
                converted_unit_price=unit * rate,
                converted_line_total=line_total * rate,
                display_unit_price=format_amount(unit * rate, resolved.symbol),
                display_line_total=format_amount(line_total * rate, resolved.symbol),
            )
        )

    converted_subtotal = subtotal * rate
    converted_surcharge = surcharge * rate
    converted_grand_total = grand_total * rate
    return Totals(
        currency=resolved.code,
        symbol=resolved.symbol,
        rate=rate,
        surcharge_percent=pct,
        has_surcharge=pct > 0,
        item_count=sum(line.quantity for line in snapshot),
        base_subtotal=subtotal,
        surcharge_amount=surcharge,
        base_grand_total=grand_total,
        converted_subtotal=converted_subtotal,
        converted_surcharge=converted_surcharge,
        converted_grand_total=converted_grand_total,
        display_subtotal=format_amount(converted_subtotal, resolved.symbol),
        display_surcharge=format_amount(converted_surcharge, resolved.symbol),
        display_grand_total=format_amount(converted_grand_total, resolved.symbol),
        lines=line_totals,
    )
