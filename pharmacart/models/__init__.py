"""Pydantic domain models for the PharmaCart pricing service."""

from .constants import (
    BASE_CURRENCY,
    SUPPORTED_CURRENCIES,
    SORT_OPTIONS,
    SURCHARGE_PRESETS,
)  # re-export
from .product import Product
from .rates import CurrencyRate, RateTable
from .cart import CartLine, PricingSelection
from .pricing import LineTotal, Totals

__all__ = [
    "BASE_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "SORT_OPTIONS",
    "SURCHARGE_PRESETS",
    "Product",
    "CurrencyRate",
    "RateTable",
    "CartLine",
    "PricingSelection",
    "LineTotal",
    "Totals",
]
