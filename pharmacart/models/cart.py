from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from .constants import BASE_CURRENCY
from .product import Product


class CartLine(BaseModel):
    """One product in the cart. `product` is a snapshot taken at add time."""

    product: Product
    quantity: int = Field(..., ge=1)


class CartItemAddIn(BaseModel):
    product_id: str
    # coerced by the cart; anything unusable counts as 1
    quantity: Optional[Any] = None


class CartItemDirectIn(BaseModel):
    product_id: str
    quantity: Any = None


class CartQuantityIn(BaseModel):
    quantity: Any


class CartAdjustIn(BaseModel):
    delta: int


class SurchargeIn(BaseModel):
    surcharge_percent: Any = Field(..., description="Markup percentage, >= 0")


class CurrencyIn(BaseModel):
    currency: str = Field(..., min_length=1, max_length=8)


class PricingSelection(BaseModel):
    surcharge_percent: Decimal = Field(Decimal("0"), ge=0)
    currency: str = BASE_CURRENCY
