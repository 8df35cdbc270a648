from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pharmacart.models.cart import (
    CartAdjustIn,
    CartItemAddIn,
    CartItemDirectIn,
    CartQuantityIn,
    CurrencyIn,
    SurchargeIn,
)
from pharmacart.models.pricing import LineTotal, Totals
from pharmacart.services.catalog import Catalog
from pharmacart.services.rates.cache_service import RateCache
from pharmacart.services.session import CartSession
from .deps import get_catalog, get_rate_cache, get_session

router = APIRouter(prefix="/cart", tags=["cart"])


class CartOut(BaseModel):
    session_id: str
    currency: str
    surcharge_percent: Decimal
    item_count: int
    rates_fallback: bool
    lines: List[LineTotal]
    totals: Totals

    @classmethod
    def build(cls, session: CartSession, cache: RateCache) -> "CartOut":
        table = cache.current()
        totals = session.totals(table)
        return cls(
            session_id=session.id,
            currency=totals.currency,
            surcharge_percent=session.selection.surcharge_percent,
            item_count=session.cart.total_item_count(),
            rates_fallback=table.is_fallback,
            lines=totals.lines,
            totals=totals,
        )


@router.get("/", response_model=CartOut, summary="Cart contents with totals")
async def get_cart(
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    return CartOut.build(session, cache)


@router.get("/totals", response_model=Totals, summary="Cart totals only")
async def get_totals(
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    return session.totals(cache.current())


@router.post("/items", response_model=CartOut, summary="Add a product (default 1)")
async def add_item(
    payload: CartItemAddIn,
    session: CartSession = Depends(get_session),
    catalog: Catalog = Depends(get_catalog),
    cache: RateCache = Depends(get_rate_cache),
):
    product = catalog.get(payload.product_id)
    session.cart.add_or_increment(product, payload.quantity)
    return CartOut.build(session, cache)


@router.post(
    "/items/direct", response_model=CartOut, summary="Add an explicit quantity (>= 1)"
)
async def add_item_direct(
    payload: CartItemDirectIn,
    session: CartSession = Depends(get_session),
    catalog: Catalog = Depends(get_catalog),
    cache: RateCache = Depends(get_rate_cache),
):
    product = catalog.get(payload.product_id)
    session.cart.add_direct(product, payload.quantity)
    return CartOut.build(session, cache)


@router.put("/items/{product_id}", response_model=CartOut, summary="Set line quantity")
async def set_item_quantity(
    product_id: str,
    payload: CartQuantityIn,
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.cart.set_quantity(product_id, payload.quantity)
    return CartOut.build(session, cache)


@router.patch(
    "/items/{product_id}", response_model=CartOut, summary="Adjust line quantity by delta"
)
async def adjust_item_quantity(
    product_id: str,
    payload: CartAdjustIn,
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.cart.adjust_quantity(product_id, payload.delta)
    return CartOut.build(session, cache)


@router.delete("/items/{product_id}", response_model=CartOut, summary="Remove a line")
async def remove_item(
    product_id: str,
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.cart.remove(product_id)
    return CartOut.build(session, cache)


@router.delete("/", response_model=CartOut, summary="Clear cart and surcharge")
async def clear_cart(
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.clear()
    return CartOut.build(session, cache)


@router.put("/surcharge", response_model=CartOut, summary="Set surcharge percent")
async def set_surcharge(
    payload: SurchargeIn,
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.set_surcharge(payload.surcharge_percent)
    return CartOut.build(session, cache)


@router.put("/currency", response_model=CartOut, summary="Select display currency")
async def set_currency(
    payload: CurrencyIn,
    session: CartSession = Depends(get_session),
    cache: RateCache = Depends(get_rate_cache),
):
    session.set_currency(payload.currency)
    return CartOut.build(session, cache)
