from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pharmacart.models.constants import BASE_CURRENCY, SURCHARGE_PRESETS
from pharmacart.models.rates import RateTable
from pharmacart.services.rates.cache_service import RateCache
from .deps import get_rate_cache

"""Rates router.

Endpoints:
    - GET /rates             -> current table with freshness / fallback flags
    - POST /rates/refresh    -> resolve now and return the new table
    - GET /rates/currencies  -> selectable currencies and surcharge presets

Rate tables are read-only to clients; the only write is a refresh request.
"""

router = APIRouter(prefix="/rates", tags=["rates"])


class RateOut(BaseModel):
    code: str
    symbol: str
    name: str
    units_per_base: Decimal


class RateTableOut(BaseModel):
    base_currency: str
    resolved_at: datetime
    is_fallback: bool
    source: Optional[str]
    loading: bool
    rates: List[RateOut]

    @classmethod
    def from_table(cls, table: RateTable, loading: bool) -> "RateTableOut":
        return cls(
            base_currency=table.base_currency,
            resolved_at=table.resolved_at,
            is_fallback=table.is_fallback,
            source=table.source,
            loading=loading,
            rates=[RateOut(**r.model_dump()) for r in table.rates.values()],
        )


class CurrencyOptionsOut(BaseModel):
    base_currency: str
    currencies: List[RateOut]
    surcharge_presets: List[int]


@router.get("/", response_model=RateTableOut, summary="Current rate table")
async def current_rates(cache: RateCache = Depends(get_rate_cache)):
    return RateTableOut.from_table(cache.current(), cache.loading)


@router.post("/refresh", response_model=RateTableOut, summary="Refresh rates now")
async def refresh_rates(cache: RateCache = Depends(get_rate_cache)):
    table = await cache.refresh_now()
    return RateTableOut.from_table(table, cache.loading)


@router.get(
    "/currencies", response_model=CurrencyOptionsOut, summary="Selectable currencies"
)
async def currency_options(cache: RateCache = Depends(get_rate_cache)):
    table = cache.current()
    return CurrencyOptionsOut(
        base_currency=BASE_CURRENCY,
        currencies=[RateOut(**r.model_dump()) for r in table.rates.values()],
        surcharge_presets=list(SURCHARGE_PRESETS),
    )
