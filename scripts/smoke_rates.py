"""Smoke script for live rate resolution.

Demonstrates:
 1. The cache serves the static fallback table before anything is resolved.
 2. A manual refresh probes the configured sources in order.
 3. A sample cart priced in a few currencies with the resolved table.

NOTE: This hits the real rate endpoints and is a diagnostic, not a formal test.
"""

import asyncio
from decimal import Decimal
from pprint import pprint

from pharmacart.core.config import get_settings
from pharmacart.core.logging import init_logging
from pharmacart.models.product import Product
from pharmacart.services.cart import Cart
from pharmacart.services.pricing import compute_totals
from pharmacart.services.rates.cache_service import RateCache
from pharmacart.services.rates.resolver import RateResolver


async def run():
    settings = get_settings()
    init_logging(debug=True)
    cache = RateCache(RateResolver.from_settings(settings))
    out = {"before": {}, "after": {}, "totals": {}}

    before = cache.current()
    out["before"] = {"is_fallback": before.is_fallback, "USD": str(before.get("USD").units_per_base)}

    table = await cache.refresh_now()
    out["after"] = {
        "is_fallback": table.is_fallback,
        "source": table.source,
        "resolved_at": table.resolved_at.isoformat(),
        "rates": {c: str(r.units_per_base) for c, r in table.rates.items()},
    }

    cart = Cart()
    cart.add_or_increment(Product(id="a", name="Sample A", base_price=Decimal("100")), 2)
    cart.add_or_increment(Product(id="b", name="Sample B", base_price=Decimal("50")), 1)
    for code in ("INR", "USD", "EUR", "JPY"):
        totals = compute_totals(cart, Decimal("10"), code, cache.current())
        out["totals"][code] = totals.display_grand_total

    pprint(out)


if __name__ == "__main__":
    asyncio.run(run())
