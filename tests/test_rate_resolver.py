import asyncio
from decimal import Decimal

import pytest

from pharmacart.models.constants import BASE_CURRENCY, SUPPORTED_CURRENCIES
from pharmacart.services.http_client import HttpError
from pharmacart.services.rates.base import RateShape, default_shapes, normalize_payload
from pharmacart.services.rates.resolver import RateResolver, build_table, fallback_table
from .conftest import SOURCE_A, SOURCE_B, FakeFetch

SOURCE_C = "https://rates-c.test/inr.json"


def resolve(resolver: RateResolver):
    return asyncio.run(resolver.resolve())


def test_second_source_used_when_first_fails():
    fetch = FakeFetch({SOURCE_A: HttpError("down"), SOURCE_B: {"rates": {"USD": 0.02}}})
    table = resolve(RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch))

    assert table.is_fallback is False
    assert table.source == SOURCE_B
    assert table.get("USD").units_per_base == Decimal("0.02")
    for code, spec in SUPPORTED_CURRENCIES.items():
        if code not in ("USD", BASE_CURRENCY):
            assert table.get(code).units_per_base == spec.default_rate


def test_all_sources_failing_gives_fallback_table():
    fetch = FakeFetch({})
    table = resolve(RateResolver([SOURCE_A, SOURCE_B, SOURCE_C], fetch_json=fetch))

    assert table.is_fallback is True
    assert table.source is None
    assert fetch.calls == [SOURCE_A, SOURCE_B, SOURCE_C]
    assert set(table.rates) == set(SUPPORTED_CURRENCIES)
    for code, spec in SUPPORTED_CURRENCIES.items():
        assert table.get(code).units_per_base == spec.default_rate


def test_first_success_wins_without_contacting_later_sources():
    fetch = FakeFetch(
        {SOURCE_A: {"rates": {"EUR": 0.01}}, SOURCE_B: {"rates": {"EUR": 0.5}}}
    )
    table = resolve(RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch))

    assert fetch.calls == [SOURCE_A]
    assert table.get("EUR").units_per_base == Decimal("0.01")


def test_unrecognised_payload_moves_to_next_source():
    fetch = FakeFetch(
        {
            SOURCE_A: {"result": "error", "error-type": "quota-reached"},
            SOURCE_B: {"conversion_rates": {"GBP": 0.009}},
        }
    )
    table = resolve(RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch))

    assert table.source == SOURCE_B
    assert table.get("GBP").units_per_base == Decimal("0.009")


def test_unexpected_fetch_exception_is_contained():
    fetch = FakeFetch({SOURCE_A: RuntimeError("bug"), SOURCE_B: {"rates": {"USD": 0.013}}})
    table = resolve(RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch))

    assert table.get("USD").units_per_base == Decimal("0.013")


def test_nested_lowercase_shape():
    payload = {"date": "2025-01-01", "inr": {"usd": 0.0117, "jpy": 1.8, "inr": 1}}
    fetch = FakeFetch({SOURCE_C: payload})
    table = resolve(RateResolver([SOURCE_C], fetch_json=fetch))

    assert table.get("USD").units_per_base == Decimal("0.0117")
    assert table.get("JPY").units_per_base == Decimal("1.8")


def test_base_currency_pinned_to_one():
    table = build_table({"INR": 2, "USD": 0.012})
    assert table.get("INR").units_per_base == Decimal("1")


@pytest.mark.parametrize("bad", [0, -0.5, "abc", None, True, float("nan")])
def test_unusable_rate_values_use_default(bad):
    table = build_table({"USD": bad})
    assert table.get("USD").units_per_base == SUPPORTED_CURRENCIES["USD"].default_rate


def test_upper_case_key_preferred_over_lower():
    table = build_table({"USD": 0.02, "usd": 0.03})
    assert table.get("USD").units_per_base == Decimal("0.02")


def test_shape_priority_order():
    payload = {"conversion_rates": {"USD": 0.5}, "rates": {"USD": 0.1}}
    rates = normalize_payload(payload, default_shapes("INR"))
    assert rates == {"USD": 0.1}


def test_normalize_rejects_non_mapping():
    shapes = default_shapes("INR")
    assert normalize_payload(["not", "a", "map"], shapes) is None
    assert normalize_payload({"rates": ["USD", 0.01]}, shapes) is None


def test_normalize_accepts_empty_rate_map():
    assert normalize_payload({"rates": {}}, default_shapes("INR")) == {}


def test_empty_rate_map_wins_with_default_rates():
    fetch = FakeFetch({SOURCE_A: {"rates": {}}, SOURCE_B: {"rates": {"USD": 0.5}}})
    table = resolve(RateResolver([SOURCE_A, SOURCE_B], fetch_json=fetch))

    assert fetch.calls == [SOURCE_A]
    assert table.is_fallback is False
    assert table.source == SOURCE_A
    for code, spec in SUPPORTED_CURRENCIES.items():
        assert table.get(code).units_per_base == spec.default_rate


def test_custom_shape_can_be_added():
    shapes = list(default_shapes("INR")) + [
        RateShape(
            "response.rates",
            lambda p: isinstance(p.get("response"), dict),
            lambda p: p["response"]["rates"],
        )
    ]
    fetch = FakeFetch({SOURCE_A: {"response": {"rates": {"AED": 0.05}}}})
    table = resolve(RateResolver([SOURCE_A], fetch_json=fetch, shapes=shapes))

    assert table.get("AED").units_per_base == Decimal("0.05")


def test_fallback_table_is_flagged():
    table = fallback_table()
    assert table.is_fallback
    assert table.base_currency == "INR"
