"""Domain constants: supported currencies, sort keys, surcharge presets.

Default rates are units of each currency per 1 INR, used whenever no live
source supplies a value for that code.
"""

from decimal import Decimal
from typing import Dict, NamedTuple, Tuple


class CurrencySpec(NamedTuple):
    symbol: str
    name: str
    default_rate: Decimal


BASE_CURRENCY = "INR"

SUPPORTED_CURRENCIES: Dict[str, CurrencySpec] = {
    "INR": CurrencySpec("₹", "Indian Rupee", Decimal("1")),
    "USD": CurrencySpec("$", "US Dollar", Decimal("0.012")),
    "EUR": CurrencySpec("€", "Euro", Decimal("0.011")),
    "GBP": CurrencySpec("£", "British Pound", Decimal("0.0095")),
    "JPY": CurrencySpec("¥", "Japanese Yen", Decimal("1.78")),
    "AUD": CurrencySpec("A$", "Australian Dollar", Decimal("0.018")),
    "CAD": CurrencySpec("C$", "Canadian Dollar", Decimal("0.016")),
    "CHF": CurrencySpec("CHF", "Swiss Franc", Decimal("0.011")),
    "CNY": CurrencySpec("¥", "Chinese Yuan", Decimal("0.087")),
    "AED": CurrencySpec("AED", "UAE Dirham", Decimal("0.044")),
    "SAR": CurrencySpec("SAR", "Saudi Riyal", Decimal("0.045")),
    "SGD": CurrencySpec("S$", "Singapore Dollar", Decimal("0.016")),
}

SORT_OPTIONS: Tuple[str, ...] = ("name", "price-low", "price-high")
SURCHARGE_PRESETS: Tuple[int, ...] = (5, 10, 15, 20, 25, 50)
DEFAULT_PAGE_SIZE = 50
