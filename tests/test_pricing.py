from decimal import Decimal

import pytest

from pharmacart.core.errors import InvalidSurchargeError
from pharmacart.services.cart import Cart
from pharmacart.services.pricing import compute_totals, parse_surcharge
from pharmacart.services.rates.conversion import convert, resolve_currency, to_base
from pharmacart.services.rates.resolver import build_table
from .conftest import make_product


@pytest.fixture
def cart():
    c = Cart()
    c.add_or_increment(make_product("a", "100"), 2)
    c.add_or_increment(make_product("b", "50"), 1)
    return c


def test_end_to_end_scenario(cart, usd_table):
    totals = compute_totals(cart, Decimal("10"), "USD", usd_table)

    assert totals.base_subtotal == Decimal("250")
    assert totals.surcharge_amount == Decimal("25")
    assert totals.base_grand_total == Decimal("275")
    assert totals.rate == Decimal("0.012")
    assert totals.converted_grand_total == Decimal("3.3")
    assert totals.display_grand_total == "$ 3.30"
    assert totals.has_surcharge is True
    assert totals.item_count == 3


def test_zero_surcharge_grand_total_equals_subtotal(cart, usd_table):
    totals = compute_totals(cart, 0, "USD", usd_table)
    assert totals.base_grand_total == totals.base_subtotal
    assert totals.surcharge_amount == 0
    assert totals.has_surcharge is False


@pytest.mark.parametrize("pct", ["0", "2.5", "10", "33.333", "150"])
def test_grand_total_formula(cart, usd_table, pct):
    totals = compute_totals(cart, pct, "INR", usd_table)
    expected = totals.base_subtotal * (1 + Decimal(pct) / 100)
    assert totals.base_grand_total == expected


def test_empty_cart_is_all_zero(usd_table):
    totals = compute_totals(Cart(), 25, "USD", usd_table)
    assert totals.base_subtotal == 0
    assert totals.surcharge_amount == 0
    assert totals.converted_grand_total == 0
    assert totals.display_grand_total == "$ 0.00"
    assert totals.lines == []


def test_unknown_currency_prices_at_base(cart, usd_table):
    totals = compute_totals(cart, 0, "XYZ", usd_table)
    assert totals.rate == 1
    assert totals.converted_grand_total == totals.base_grand_total
    assert totals.symbol == "₹"


def test_currency_code_is_case_insensitive(cart, usd_table):
    totals = compute_totals(cart, 0, "usd", usd_table)
    assert totals.currency == "USD"
    assert totals.rate == Decimal("0.012")


def test_line_amounts_use_same_rate(cart, usd_table):
    totals = compute_totals(cart, 0, "USD", usd_table)
    first = totals.lines[0]
    assert first.converted_unit_price == Decimal("1.2")
    assert first.converted_line_total == Decimal("2.4")
    second = totals.lines[1]
    assert second.display_unit_price == "$ 0.6000"
    assert sum(l.converted_line_total for l in totals.lines) == totals.converted_subtotal


def test_pricing_does_not_mutate_cart(cart, usd_table):
    before = cart.as_dict()
    compute_totals(cart, 10, "EUR", usd_table)
    assert cart.as_dict() == before


def test_negative_surcharge_rejected(cart, usd_table):
    with pytest.raises(InvalidSurchargeError):
        compute_totals(cart, -1, "USD", usd_table)


@pytest.mark.parametrize("value,expected", [("12.5", Decimal("12.5")), (0, Decimal("0")), (7, Decimal("7"))])
def test_parse_surcharge(value, expected):
    assert parse_surcharge(value) == expected


@pytest.mark.parametrize("value", ["abc", "", None, -5, "-0.1", "inf"])
def test_parse_surcharge_rejects(value):
    with pytest.raises(InvalidSurchargeError):
        parse_surcharge(value)


@pytest.mark.parametrize("code", ["USD", "JPY", "GBP", "INR"])
def test_conversion_round_trip(code):
    table = build_table({"USD": 0.0119, "JPY": 1.77})
    amount = Decimal("1234.56")
    assert to_base(convert(amount, code, table), code, table) == pytest.approx(amount)


def test_resolve_currency_unknown():
    resolved = resolve_currency("???", build_table(None))
    assert not resolved.known
    assert resolved.rate == 1
