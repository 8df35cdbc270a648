from __future__ import annotations

"""Rate resolution across an ordered list of unreliable sources.

Sources are probed one at a time in fixed priority order; the first one that
answers with a recognisable payload wins and later sources are not contacted.
Whatever happens the caller gets a complete RateTable: codes missing from the
winning payload take their static default, and if every source fails the
whole table is built from defaults and flagged `is_fallback`.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from pharmacart.core.config import Settings
from pharmacart.models.constants import BASE_CURRENCY, SUPPORTED_CURRENCIES
from pharmacart.models.rates import CurrencyRate, RateTable
from pharmacart.services.http_client import HttpError, get_json
from .base import RateMap, RateShape, default_shapes, normalize_payload

logger = logging.getLogger("pharmacart.rates")

FetchJson = Callable[[str], Awaitable[Any]]


def _positive_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not rate.is_finite() or rate <= 0:
        return None
    return rate


def _lookup(rates: Mapping[str, Any], code: str) -> Optional[Decimal]:
    found = _positive_decimal(rates.get(code.upper()))
    if found is None:
        found = _positive_decimal(rates.get(code.lower()))
    return found


def build_table(
    rates: Optional[Mapping[str, Any]],
    *,
    is_fallback: bool = False,
    source: Optional[str] = None,
    resolved_at: Optional[datetime] = None,
) -> RateTable:
    """Canonical table over every supported currency.

    The base currency is pinned at 1 regardless of what the payload says.
    """
    rates = rates or {}
    table = {}
    for code, spec in SUPPORTED_CURRENCIES.items():
        if code == BASE_CURRENCY:
            rate = Decimal("1")
        else:
            rate = _lookup(rates, code) or spec.default_rate
        table[code] = CurrencyRate(
            code=code, symbol=spec.symbol, name=spec.name, units_per_base=rate
        )
    return RateTable(
        base_currency=BASE_CURRENCY,
        rates=table,
        resolved_at=resolved_at or datetime.now(timezone.utc),
        is_fallback=is_fallback,
        source=source,
    )


def fallback_table() -> RateTable:
    return build_table(None, is_fallback=True)


class RateResolver:
    """Resolve a RateTable from the first usable source.

    `fetch_json` is any coroutine function taking a URL and returning decoded
    JSON, raising on failure; it defaults to the shared httpx helper.
    """

    def __init__(
        self,
        sources: Sequence[str],
        *,
        fetch_json: Optional[FetchJson] = None,
        shapes: Optional[Sequence[RateShape]] = None,
        timeout: float = 5.0,
        retries: int = 0,
    ):
        self.sources = list(sources)
        self._shapes = shapes if shapes is not None else default_shapes(BASE_CURRENCY)
        if fetch_json is None:

            async def _fetch_default(url: str) -> Any:
                return await get_json(url, timeout=timeout, retries=retries)

            fetch_json = _fetch_default
        self._fetch_json = fetch_json

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateResolver":
        return cls(
            settings.rate_source_urls,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
        )

    async def _probe(self, url: str) -> Optional[RateMap]:
        try:
            payload = await self._fetch_json(url)
        except HttpError as e:
            logger.warning("rate source unavailable: %s", e)
            return None
        except Exception:  # any fetcher failure just means "try the next one"
            logger.warning("rate source %s raised unexpectedly", url, exc_info=True)
            return None
        rates = normalize_payload(payload, self._shapes)
        if rates is None:
            logger.warning("rate source %s returned an unrecognised payload", url)
        return rates

    async def resolve(self) -> RateTable:
        for url in self.sources:
            rates = await self._probe(url)
            if rates is not None:
                logger.info("rates resolved from %s", url)
                return build_table(rates, source=url)
        logger.warning(
            "all %d rate sources failed; using fallback rates", len(self.sources)
        )
        return fallback_table()
