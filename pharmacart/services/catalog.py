"""Product catalog: ingestion, name search, sorting and pagination.

The catalog is loaded once at startup from a JSON array of product records.
Ingestion fills in defaults for missing fields (see Product.from_record), so
nothing downstream ever handles a partial product.

Search matches the product name only (case-insensitive substring). A blank
term returns nothing unless the caller asks to browse the full catalog.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pharmacart.core.errors import CatalogLoadError, ProductNotFoundError
from pharmacart.models.constants import DEFAULT_PAGE_SIZE
from pharmacart.models.product import Product, generate_product_id

logger = logging.getLogger("pharmacart.catalog")


@dataclass
class Page:
    items: List[Product]
    total: int
    limit: int
    offset: int
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total

    @property
    def next_limit(self) -> int:
        """Limit to request for 'load more' (grows by one page)."""
        return self.limit + self.page_size


def _sort_key_name(p: Product) -> str:
    return p.name.casefold()


def sort_products(products: Iterable[Product], sort: Optional[str]) -> List[Product]:
    items = list(products)
    if sort == "name":
        return sorted(items, key=_sort_key_name)
    if sort == "price-low":
        return sorted(items, key=lambda p: p.base_price)
    if sort == "price-high":
        return sorted(items, key=lambda p: p.base_price, reverse=True)
    return items


def paginate(
    items: Sequence[Product],
    limit: int,
    offset: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    limit = max(1, int(limit))
    offset = max(0, int(offset))
    return Page(
        items=list(items[offset : offset + limit]),
        total=len(items),
        limit=limit,
        offset=offset,
        page_size=max(1, int(page_size)),
    )


class Catalog:
    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[str, Product] = {}
        for p in products:
            if p.id in self._products:
                # keep ids unique; a clash gets a fresh id
                logger.warning("duplicate product id %s in catalog; reassigning", p.id)
                p = p.model_copy(update={"id": self._fresh_id()})
            self._products[p.id] = p

    def _fresh_id(self) -> str:
        while True:
            pid = generate_product_id()
            if pid not in self._products:
                return pid

    @classmethod
    def ingest(cls, records: Iterable[Dict[str, Any]]) -> "Catalog":
        products = []
        for rec in records:
            if not isinstance(rec, dict):
                logger.warning("skipping non-object catalog record: %r", rec)
                continue
            products.append(Product.from_record(rec))
        return cls(products)

    @classmethod
    def load(cls, path: Path) -> "Catalog":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise CatalogLoadError(f"cannot read catalog {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("products", [])
        if not isinstance(data, list):
            raise CatalogLoadError(f"catalog {path} must hold a list of products")
        catalog = cls.ingest(data)
        logger.info("catalog loaded: %d products from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        return len(self._products)

    def all(self) -> List[Product]:
        return list(self._products.values())

    def get(self, product_id: str) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise ProductNotFoundError(f"product '{product_id}' not found") from None

    def search(
        self, term: str = "", sort: Optional[str] = "name", show_all: bool = False
    ) -> List[Product]:
        needle = (term or "").strip().casefold()
        if not needle:
            if not show_all:
                return []
            return sort_products(self._products.values(), sort)
        hits = (p for p in self._products.values() if needle in p.name.casefold())
        return sort_products(hits, sort)
