# Overview: Flask API routes for inventory products; parses input and returns JSON responses.

from flask import Blueprint, request
from ..services import products_service
from ..validation import ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products from the catalog cache.

    Query params:
    - category: str (optional) - exact category, "all" for every category
    - q: str (optional) - name or barcode search term
    """
    return products_service.list_products(
        category=request.args.get("category"),
        search=request.args.get("q"),
    )


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        created = products_service.create_product(payload)
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    return created, 201


@products_bp.post("/demo")
def seed_demo_route():
    """Load the demo catalog (stationery, services, custom job)."""
    added = products_service.seed_demo_products()
    return {"ok": True, "added": added}, 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = products_service.get_product(product_id)
    if not product:
        return {"error": "Product not found"}, 404
    return product.to_dict(), 200


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Replace a product; omitted fields reset to their defaults."""
    payload = request.get_json(silent=True) or {}

    try:
        updated = products_service.update_product(product_id, payload)
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    if not updated:
        return {"error": "Product not found"}, 404

    return updated, 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    if not products_service.delete_product(product_id):
        return {"error": "Product not found"}, 404

    return {"ok": True}, 200
