# backend/commcentre/services/products_service.py
"""
Products Service

Inventory CRUD for the shop's catalog. Every write invalidates the POS
catalog cache so the next cart lookup sees current prices and stock.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from ..validation import ModelValidationPolicy, validate_payload
from .catalog import ProductCatalog, get_catalog
from commcentre.time_utils import utcnow

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "barcode", "category",
        "cost_price", "selling_price", "stock_quantity",
    },
    required_on_create={"name"},
    amount_fields={
        "cost_price": "cost_price_cents",
        "selling_price": "selling_price_cents",
    },
    integer_fields={"stock_quantity"},
    defaults={"category": "General"},
)

# (name, category, cost, selling price, stock)
DEMO_PRODUCTS = [
    ("A4 Paper", "Stationery", 2, 5, 500),
    ("CR Books (80pg)", "Stationery", 120, 160, 50),
    ("Blue Pen", "Stationery", 20, 30, 100),
    ("Pencil", "Stationery", 10, 15, 100),
    ("Photocopy (B&W A4)", "Services", 2, 10, 9999),
    ("Printout (Color A4)", "Services", 10, 40, 9999),
    ("Binding (Spiral)", "Services", 50, 150, 9999),
    ("Wedding Card Design", "Custom Job", 0, 5000, 9999),
]


def _matches(item: dict, category: str | None, term: str | None) -> bool:
    if category and category != "all" and item["category"] != category:
        return False
    if term:
        name_hit = term in (item["name"] or "").lower()
        barcode_hit = bool(item["barcode"]) and term in item["barcode"]
        if not (name_hit or barcode_hit):
            return False
    return True


def list_products(
    category: str | None = None,
    search: str | None = None,
    catalog: ProductCatalog | None = None,
) -> dict:
    """
    Catalog listing for the POS grid and inventory table.

    category: exact match, "all" or None for no filter
    search: case-insensitive name substring, or barcode substring
    """
    catalog = catalog or get_catalog()
    term = (search or "").strip().lower() or None

    items = [p for p in catalog.all() if _matches(p, category, term)]
    return {"items": items, "count": len(items)}


def get_product(product_id: int) -> Product | None:
    return db.session.get(Product, product_id)


def create_product(payload: dict) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY)

    p = Product(date_added=utcnow(), **patch)
    db.session.add(p)
    db.session.commit()

    get_catalog().invalidate()
    current_app.logger.info("Created product id=%s name=%r", p.id, p.name)
    return p.to_dict()


def update_product(product_id: int, payload: dict) -> dict | None:
    """
    Replace every writable field of a product.

    date_added is kept from the original row. Returns None if not found.
    """
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY)

    p = get_product(product_id)
    if not p:
        return None

    for k, v in patch.items():
        setattr(p, k, v)
    db.session.commit()

    get_catalog().invalidate()
    current_app.logger.info("Updated product id=%s", p.id)
    return p.to_dict()


def delete_product(product_id: int) -> bool:
    """
    Hard-delete a product. Historical sales keep their own snapshot.

    Returns True if deleted, False if not found.
    """
    p = get_product(product_id)
    if not p:
        return False

    db.session.delete(p)
    db.session.commit()

    get_catalog().invalidate()
    current_app.logger.info("Deleted product id=%s", product_id)
    return True


def seed_demo_products() -> int:
    """Bulk-insert the demo catalog. Returns the number of rows added."""
    now = utcnow()
    rows = [
        Product(
            name=name,
            category=category,
            cost_price_cents=cost * 100,
            selling_price_cents=price * 100,
            stock_quantity=stock,
            date_added=now,
        )
        for name, category, cost, price, stock in DEMO_PRODUCTS
    ]
    db.session.add_all(rows)
    db.session.commit()

    get_catalog().invalidate()
    return len(rows)


def low_stock_products(threshold: int | None = None) -> list[Product]:
    if threshold is None:
        threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    return (
        db.session.query(Product)
        .filter(Product.stock_quantity < threshold)
        .order_by(Product.stock_quantity.asc(), Product.name.asc())
        .all()
    )
