from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from pharmacart.core.config import Settings
from pharmacart.models.constants import BASE_CURRENCY, SORT_OPTIONS
from pharmacart.models.product import Product
from pharmacart.services.catalog import Catalog, paginate
from pharmacart.services.money import format_amount
from pharmacart.services.rates.cache_service import RateCache
from pharmacart.services.rates.conversion import resolve_currency
from pharmacart.services.session import CartSession
from .deps import find_session, get_app_settings, get_catalog, get_rate_cache

router = APIRouter(prefix="/products", tags=["catalog"])


def _selected_currency(session: Optional[CartSession]) -> str:
    # unkeyed browsing prices in the base currency
    return session.selection.currency if session is not None else BASE_CURRENCY


class ProductOut(BaseModel):
    id: str
    name: str
    composition: str
    packing: str
    pack_count: int
    base_price: Decimal
    converted_price: Decimal
    display_price: str

    @classmethod
    def from_product(cls, p: Product, symbol: str, rate: Decimal) -> "ProductOut":
        converted = p.base_price * rate
        return cls(
            id=p.id,
            name=p.name,
            composition=p.composition,
            packing=p.packing,
            pack_count=p.pack_count,
            base_price=p.base_price,
            converted_price=converted,
            display_price=format_amount(converted, symbol),
        )


class ProductPageOut(BaseModel):
    items: List[ProductOut]
    total: int
    catalog_size: int
    limit: int
    offset: int
    has_more: bool
    next_limit: int
    currency: str


@router.get("/", response_model=ProductPageOut, summary="Search the catalog")
async def search_products(
    q: str = Query("", description="Name search, case-insensitive"),
    sort: str = Query("name", description=f"One of {', '.join(SORT_OPTIONS)}"),
    show_all: bool = Query(False, description="Browse the whole catalog when q is blank"),
    limit: Optional[int] = Query(None, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    catalog: Catalog = Depends(get_catalog),
    cache: RateCache = Depends(get_rate_cache),
    session: Optional[CartSession] = Depends(find_session),
    settings: Settings = Depends(get_app_settings),
):
    hits = catalog.search(q, sort=sort, show_all=show_all)
    page = paginate(
        hits,
        limit or settings.default_page_size,
        offset,
        page_size=settings.default_page_size,
    )
    currency = resolve_currency(_selected_currency(session), cache.current())
    return ProductPageOut(
        items=[ProductOut.from_product(p, currency.symbol, currency.rate) for p in page.items],
        total=page.total,
        catalog_size=len(catalog),
        limit=page.limit,
        offset=page.offset,
        has_more=page.has_more,
        next_limit=page.next_limit,
        currency=currency.code,
    )


@router.get("/{product_id}", response_model=ProductOut, summary="Product details")
async def get_product(
    product_id: str,
    catalog: Catalog = Depends(get_catalog),
    cache: RateCache = Depends(get_rate_cache),
    session: Optional[CartSession] = Depends(find_session),
):
    product = catalog.get(product_id)
    currency = resolve_currency(_selected_currency(session), cache.current())
    return ProductOut.from_product(product, currency.symbol, currency.rate)
