from __future__ import annotations

import secrets
import string
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

_ID_ALPHABET = string.ascii_lowercase + string.digits

UNKNOWN_NAME = "Unknown Product"
UNKNOWN_COMPOSITION = "No Composition Info"
UNKNOWN_PACKING = "No Packaging Info"


def generate_product_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


class Product(BaseModel):
    """Immutable catalog entry priced in the base currency."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = UNKNOWN_NAME
    composition: str = UNKNOWN_COMPOSITION
    packing: str = UNKNOWN_PACKING
    base_price: Decimal = Field(Decimal("0"), ge=0)
    pack_count: int = Field(1, ge=1)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Product":
        """Build a Product from a raw catalog record, defaulting missing fields.

        Accepts the upstream catalog keys (BRAND_NAME, COMPOSITION, packing,
        price, count) as well as the model's own field names. Falsy values are
        treated as missing.
        """

        def pick(*keys: str) -> Any:
            for k in keys:
                v = record.get(k)
                if v not in (None, ""):
                    return v
            return None

        raw_id = pick("id")
        return cls(
            id=str(raw_id) if raw_id is not None else generate_product_id(),
            name=str(pick("BRAND_NAME", "name") or UNKNOWN_NAME),
            composition=str(pick("COMPOSITION", "composition") or UNKNOWN_COMPOSITION),
            packing=str(pick("packing", "PACKING") or UNKNOWN_PACKING),
            base_price=_coerce_price(pick("price", "base_price")),
            pack_count=_coerce_count(pick("count", "pack_count")),
        )


def _coerce_price(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not price.is_finite() or price < 0:
        return Decimal("0")
    return price


def _coerce_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 1
    return count if count >= 1 else 1
