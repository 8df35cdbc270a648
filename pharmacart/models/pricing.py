from __future__ import annotations

from decimal import Decimal
from typing import List

from pydantic import BaseModel


class LineTotal(BaseModel):
    product_id: str
    name: str
    quantity: int
    base_unit_price: Decimal
    base_line_total: Decimal
    converted_unit_price: Decimal
    converted_line_total: Decimal
    display_unit_price: str
    display_line_total: str


class Totals(BaseModel):
    currency: str
    symbol: str
    rate: Decimal
    surcharge_percent: Decimal
    has_surcharge: bool
    item_count: int

    base_subtotal: Decimal
    surcharge_amount: Decimal
    base_grand_total: Decimal

    converted_subtotal: Decimal
    converted_surcharge: Decimal
    converted_grand_total: Decimal

    display_subtotal: str
    display_surcharge: str
    display_grand_total: str

    lines: List[LineTotal] = []
