# Overview: Read-through cache of the product catalog used by the POS screen.

from __future__ import annotations

from typing import Callable

from flask import current_app

from ..extensions import db
from ..models import Product

CATALOG_EXTENSION_KEY = "commcentre.catalog"


def load_product_snapshots() -> list[dict]:
    products = (
        db.session.query(Product)
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )
    return [p.to_dict() for p in products]


class ProductCatalog:
    """
    In-memory copy of every product, keyed by id.

    Loaded lazily on first read and dropped by invalidate(); writers call
    invalidate() after changing products, so readers may see stale rows
    until the next rebuild.
    """

    def __init__(self, loader: Callable[[], list[dict]] | None = None):
        self._loader = loader or load_product_snapshots
        self._items: dict[int, dict] | None = None

    @property
    def is_loaded(self) -> bool:
        return self._items is not None

    def _ensure_loaded(self) -> dict[int, dict]:
        if self._items is None:
            self._items = {item["id"]: item for item in self._loader()}
        return self._items

    def get(self, product_id: int) -> dict | None:
        return self._ensure_loaded().get(product_id)

    def all(self) -> list[dict]:
        return list(self._ensure_loaded().values())

    def invalidate(self) -> None:
        self._items = None


def get_catalog() -> ProductCatalog:
    """The catalog owned by the running application."""
    return current_app.extensions[CATALOG_EXTENSION_KEY]
