import pytest

from commcentre.models import Product
from commcentre.services import products_service
from commcentre.services.catalog import get_catalog
from commcentre.validation import ValidationError


def test_create_product_parses_amounts_to_cents(db_session):
    created = products_service.create_product({
        "name": "CR Books (80pg)",
        "category": "Stationery",
        "barcode": "4790001",
        "cost_price": "120",
        "selling_price": "160.50",
        "stock_quantity": "50",
    })

    assert created["cost_price_cents"] == 12000
    assert created["selling_price_cents"] == 16050
    assert created["stock_quantity"] == 50
    assert created["date_added"] is not None


def test_create_product_lenient_numbers_default_to_zero(db_session):
    created = products_service.create_product({
        "name": "Mystery item",
        "cost_price": "n/a",
        "selling_price": "",
        "stock_quantity": "lots",
    })

    assert created["cost_price_cents"] == 0
    assert created["selling_price_cents"] == 0
    assert created["stock_quantity"] == 0
    assert created["category"] == "General"
    assert created["barcode"] is None


def test_create_product_requires_name(db_session):
    with pytest.raises(ValidationError):
        products_service.create_product({"name": "", "selling_price": "10"})


def test_create_product_rejects_negative_price(db_session):
    with pytest.raises(ValidationError):
        products_service.create_product({"name": "Pen", "selling_price": "-1"})


@pytest.mark.parametrize("payload", [
    {"name": "Pen", "stock_quantity": "1e30"},
    {"name": "Pen", "stock_quantity": 10**30},
    {"name": "Pen", "stock_quantity": "-2000000"},
    {"name": "Pen", "selling_price": "1e30"},
])
def test_create_product_rejects_oversized_numbers(db_session, payload):
    with pytest.raises(ValidationError):
        products_service.create_product(payload)

    assert db_session.query(Product).count() == 0


def test_update_product_replaces_fields_and_keeps_date_added(db_session, make_product):
    p = make_product(name="Pencil", price=15, stock=100, barcode="111")
    added = p.date_added

    updated = products_service.update_product(p.id, {
        "name": "Pencil HB",
        "category": "Stationery",
        "selling_price": "20",
        "stock_quantity": "80",
    })

    assert updated["name"] == "Pencil HB"
    assert updated["selling_price_cents"] == 2000
    assert updated["stock_quantity"] == 80
    assert updated["barcode"] is None
    db_session.expire_all()
    assert db_session.get(Product, p.id).date_added == added


def test_update_missing_product_returns_none(db_session):
    assert products_service.update_product(999, {"name": "X"}) is None


def test_delete_product(db_session, make_product):
    p = make_product()

    assert products_service.delete_product(p.id) is True
    assert products_service.delete_product(p.id) is False


def test_list_products_filters_category_and_search(db_session, make_product):
    make_product(name="Blue Pen", category="Stationery", barcode="4791234")
    make_product(name="Photocopy (B&W A4)", category="Services")
    make_product(name="A4 Paper", category="Stationery")

    assert products_service.list_products()["count"] == 3
    assert products_service.list_products(category="all")["count"] == 3

    services = products_service.list_products(category="Services")
    assert [p["name"] for p in services["items"]] == ["Photocopy (B&W A4)"]

    by_name = products_service.list_products(search="a4")
    assert {p["name"] for p in by_name["items"]} == {"A4 Paper", "Photocopy (B&W A4)"}

    by_barcode = products_service.list_products(search="4791")
    assert [p["name"] for p in by_barcode["items"]] == ["Blue Pen"]

    combined = products_service.list_products(category="Stationery", search="a4")
    assert [p["name"] for p in combined["items"]] == ["A4 Paper"]


def test_mutations_invalidate_catalog(db_session):
    catalog = get_catalog()
    created = products_service.create_product({"name": "Pen", "selling_price": "30"})
    assert catalog.get(created["id"])["selling_price_cents"] == 3000
    assert catalog.is_loaded

    products_service.update_product(created["id"], {"name": "Pen", "selling_price": "35"})

    assert not catalog.is_loaded
    assert catalog.get(created["id"])["selling_price_cents"] == 3500

    products_service.delete_product(created["id"])
    assert catalog.get(created["id"]) is None


def test_seed_demo_products(db_session):
    added = products_service.seed_demo_products()

    assert added == len(products_service.DEMO_PRODUCTS)
    names = {p.name for p in db_session.query(Product).all()}
    assert "Wedding Card Design" in names
    wedding = db_session.query(Product).filter_by(name="Wedding Card Design").one()
    assert wedding.selling_price_cents == 500000


def test_low_stock_products(db_session, make_product):
    make_product(name="Low", stock=2)
    make_product(name="Negative", stock=-3)
    make_product(name="Plenty", stock=50)

    names = [p.name for p in products_service.low_stock_products()]

    assert names == ["Negative", "Low"]
    assert [p.name for p in products_service.low_stock_products(threshold=-1)] == ["Negative"]
