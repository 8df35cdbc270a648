from decimal import Decimal

import pytest

from pharmacart.core.errors import InvalidQuantityError
from pharmacart.services.cart import Cart
from .conftest import make_product


@pytest.fixture
def cart():
    return Cart()


@pytest.fixture
def aspirin():
    return make_product("asp", "12.50", name="Aspirin")


@pytest.fixture
def dolo():
    return make_product("dolo", "30", name="Dolo 650")


def test_adding_same_product_twice_merges_lines(cart, aspirin):
    cart.add_or_increment(aspirin, 2)
    cart.add_or_increment(aspirin, 3)

    assert len(cart) == 1
    assert cart.get("asp").quantity == 5
    assert cart.total_item_count() == 5


@pytest.mark.parametrize("qty", [None, "", "abc", 0, -3, "0"])
def test_implicit_add_defaults_unusable_quantity_to_one(cart, aspirin, qty):
    cart.add_or_increment(aspirin, qty)
    assert cart.get("asp").quantity == 1


def test_implicit_add_parses_numeric_strings(cart, aspirin):
    cart.add_or_increment(aspirin, "4")
    cart.add_or_increment(aspirin, "2.9")
    assert cart.get("asp").quantity == 6


@pytest.mark.parametrize("qty", [None, "", "abc", 0, -1])
def test_direct_add_rejects_invalid_quantity_without_mutation(cart, aspirin, qty):
    cart.add_or_increment(aspirin, 2)
    with pytest.raises(InvalidQuantityError):
        cart.add_direct(aspirin, qty)
    assert cart.as_dict() == {"asp": 2}


def test_direct_add_increments(cart, aspirin):
    cart.add_direct(aspirin, "7")
    cart.add_direct(aspirin, 3)
    assert cart.get("asp").quantity == 10


def test_set_quantity_zero_removes_line(cart, aspirin):
    cart.add_or_increment(aspirin, 2)
    assert cart.set_quantity("asp", 0) is None
    assert "asp" not in cart


def test_set_quantity_non_numeric_removes_line(cart, aspirin):
    cart.add_or_increment(aspirin, 2)
    cart.set_quantity("asp", "junk")
    assert len(cart) == 0


def test_set_quantity_unknown_id_is_noop(cart, aspirin):
    cart.add_or_increment(aspirin, 1)
    assert cart.set_quantity("missing", 5) is None
    assert cart.as_dict() == {"asp": 1}


def test_set_quantity_negative_is_ignored(cart, aspirin):
    cart.add_or_increment(aspirin, 4)
    cart.set_quantity("asp", -2)
    assert cart.get("asp").quantity == 4


def test_set_quantity_overwrites(cart, aspirin):
    cart.add_or_increment(aspirin, 4)
    cart.set_quantity("asp", "9")
    assert cart.get("asp").quantity == 9


def test_adjust_floors_at_zero_and_removes(cart, aspirin, dolo):
    cart.add_or_increment(aspirin, 2)
    cart.add_or_increment(dolo, 1)

    cart.adjust_quantity("asp", 3)
    assert cart.get("asp").quantity == 5
    cart.adjust_quantity("asp", -10)
    assert "asp" not in cart
    assert cart.total_item_count() == 1


def test_adjust_unknown_id_is_noop(cart):
    assert cart.adjust_quantity("ghost", 1) is None
    assert len(cart) == 0


def test_remove_and_clear(cart, aspirin, dolo):
    cart.add_or_increment(aspirin)
    cart.add_or_increment(dolo)
    assert cart.remove("asp") is True
    assert cart.remove("asp") is False
    cart.clear()
    assert len(cart) == 0
    assert cart.total_item_count() == 0


def test_lines_keep_insertion_order(cart, aspirin, dolo):
    cart.add_or_increment(dolo)
    cart.add_or_increment(aspirin)
    cart.add_or_increment(dolo)
    assert [line.product.id for line in cart.lines()] == ["dolo", "asp"]


def test_snapshot_is_taken_at_add_time(cart, aspirin):
    line = cart.add_or_increment(aspirin)
    assert line.product == aspirin
    assert line.product.base_price == Decimal("12.50")


def test_item_count_after_mixed_operations(cart, aspirin, dolo):
    cart.add_or_increment(aspirin, 3)
    cart.add_direct(dolo, 2)
    cart.adjust_quantity("dolo", -1)
    cart.set_quantity("asp", 1)
    cart.adjust_quantity("asp", -5)
    cart.remove("nothing")

    assert cart.total_item_count() == sum(line.quantity for line in cart)
    assert cart.total_item_count() == 1
    assert all(line.quantity >= 1 for line in cart)
