"""Cart aggregate.

Lines are keyed by product id in insertion order. Every mutation goes through
the methods below, which keep two invariants: one line per product id, and no
line at rest with quantity below 1.

Quantity inputs come straight from clients, so they are coerced here rather
than at each call site:
  - implicit add: anything unusable becomes 1
  - direct add: anything below 1 is rejected with InvalidQuantityError
  - set quantity: unusable becomes 0 (removes the line), negative is ignored
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterator, List, Optional

from pharmacart.core.errors import InvalidQuantityError
from pharmacart.models.cart import CartLine
from pharmacart.models.product import Product

logger = logging.getLogger("pharmacart.cart")


def _parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: 3, "3", "3.7" and 3.7 all give 3; junk gives None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    text = str(value).strip()
    sign = ""
    if text and text[0] in "+-":
        sign, text = text[0], text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    if not digits:
        return None
    return int(sign + digits)


def coerce_positive(value: Any) -> int:
    qty = _parse_int(value)
    return qty if qty is not None and qty >= 1 else 1


class Cart:
    def __init__(self) -> None:
        self._lines: "OrderedDict[str, CartLine]" = OrderedDict()

    # Read side ------------------------------------------------
    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def total_item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def as_dict(self) -> Dict[str, int]:
        return {pid: line.quantity for pid, line in self._lines.items()}

    # Mutations ------------------------------------------------
    def _increment(self, product: Product, quantity: int) -> CartLine:
        line = self._lines.get(product.id)
        if line is not None:
            line.quantity += quantity
        else:
            line = CartLine(product=product.model_copy(), quantity=quantity)
            self._lines[product.id] = line
        logger.debug("cart add %s x%d -> %d", product.id, quantity, line.quantity)
        return line

    def add_or_increment(self, product: Product, quantity: Any = 1) -> CartLine:
        return self._increment(product, coerce_positive(quantity))

    def add_direct(self, product: Product, quantity: Any) -> CartLine:
        qty = _parse_int(quantity)
        if qty is None or qty < 1:
            raise InvalidQuantityError(f"quantity must be a whole number >= 1, got {quantity!r}")
        return self._increment(product, qty)

    def set_quantity(self, product_id: str, quantity: Any) -> Optional[CartLine]:
        qty = _parse_int(quantity)
        if qty is None:
            qty = 0
        if qty < 0:
            return self._lines.get(product_id)
        if qty == 0:
            self.remove(product_id)
            return None
        line = self._lines.get(product_id)
        if line is not None:
            line.quantity = qty
        return line

    def adjust_quantity(self, product_id: str, delta: int) -> Optional[CartLine]:
        line = self._lines.get(product_id)
        if line is None:
            return None
        new_qty = max(0, line.quantity + int(delta))
        if new_qty == 0:
            self.remove(product_id)
            return None
        line.quantity = new_qty
        return line

    def remove(self, product_id: str) -> bool:
        return self._lines.pop(product_id, None) is not None

    def clear(self) -> None:
        self._lines.clear()
