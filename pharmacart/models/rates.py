from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import BASE_CURRENCY


class CurrencyRate(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    symbol: str
    name: str
    units_per_base: Decimal = Field(..., gt=0)


class RateTable(BaseModel):
    """Complete set of rates resolved at one point in time.

    Tables are never patched; a refresh builds and swaps in a new one.
    """

    model_config = ConfigDict(frozen=True)

    base_currency: str = BASE_CURRENCY
    rates: Dict[str, CurrencyRate]
    resolved_at: datetime
    is_fallback: bool = False
    source: Optional[str] = None

    @model_validator(mode="after")
    def base_present(self) -> "RateTable":
        base = self.rates.get(self.base_currency)
        if base is None or base.units_per_base != 1:
            raise ValueError("base currency must be present with rate 1")
        return self

    def get(self, code: str) -> Optional[CurrencyRate]:
        return self.rates.get(code.upper())

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self.rates
