from decimal import Decimal
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from pharmacart.core.config import Settings
from pharmacart.main import create_app
from pharmacart.models.product import Product
from pharmacart.services.catalog import Catalog
from pharmacart.services.http_client import HttpError
from pharmacart.services.rates.resolver import RateResolver, build_table

SOURCE_A = "https://rates-a.test/latest/INR"
SOURCE_B = "https://rates-b.test/latest?from=INR"


def make_product(pid: str, price: Any, name: str | None = None, **kw) -> Product:
    return Product(
        id=pid,
        name=name or f"Product {pid}",
        base_price=Decimal(str(price)),
        **kw,
    )


class FakeFetch:
    """URL -> payload (or exception instance) map standing in for HTTP."""

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls: list[str] = []

    async def __call__(self, url: str) -> Any:
        self.calls.append(url)
        outcome = self.responses.get(url, HttpError(f"HTTP 503 for {url}"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def usd_table():
    return build_table({"USD": 0.012})


@pytest.fixture
def small_catalog():
    return Catalog(
        [
            make_product("p1", "100", name="Zincovit"),
            make_product("p2", "50", name="azithral 500"),
            make_product("p3", "20", name="Dolo 650"),
        ]
    )


@pytest.fixture
def fake_fetch():
    return FakeFetch({SOURCE_A: HttpError("boom"), SOURCE_B: {"rates": {"USD": 0.012}}})


def build_app(catalog: Catalog, fetch: FakeFetch, **overrides: Any):
    settings = Settings(rates_refresh_enabled=False, **overrides)
    resolver = RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch)
    return create_app(
        settings_override=settings, resolver=resolver, catalog_override=catalog
    )


@pytest.fixture
def client(small_catalog, fake_fetch):
    app = build_app(small_catalog, fake_fetch)
    with TestClient(app, headers={"X-Session-Id": "test-session"}) as c:
        yield c
