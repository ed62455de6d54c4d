# Overview: Flask API routes for the POS cart; one cart per browser session.

# backend/commcentre/routes/pos.py
"""
POS cart routes.

The cart lives in the signed session cookie as Cart.to_dict() and is
rebuilt into a Cart on every request, so each browser session owns one
independent cart.
"""

from flask import Blueprint, current_app, jsonify, request, session

from ..services.cart_service import (
    Cart,
    CheckoutError,
    cart_summary,
    checkout,
)
from ..services.catalog import get_catalog
from ..validation import ValidationError

pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")

CART_SESSION_KEY = "cart"


def load_cart() -> Cart:
    return Cart.from_dict(session.get(CART_SESSION_KEY))


def save_cart(cart: Cart) -> None:
    session[CART_SESSION_KEY] = cart.to_dict()


@pos_bp.get("/cart")
def get_cart():
    return cart_summary(load_cart())


@pos_bp.post("/cart/lines")
def add_line_route():
    """
    Add one unit of a product to the cart.

    Unknown product ids leave the cart unchanged (added=false).
    """
    data = request.get_json(silent=True) or {}
    cart = load_cart()

    try:
        added = cart.add_line(data.get("product_id"), get_catalog())
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    save_cart(cart)

    return {"added": added, "cart": cart_summary(cart)}, 200


@pos_bp.patch("/cart/lines/<int:index>")
def adjust_line_route(index: int):
    data = request.get_json(silent=True) or {}
    cart = load_cart()

    try:
        cart.adjust_quantity(index, data.get("delta", 0))
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    save_cart(cart)
    return cart_summary(cart), 200


@pos_bp.delete("/cart/lines/<int:index>")
def remove_line_route(index: int):
    cart = load_cart()

    try:
        cart.remove_line(index)
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    save_cart(cart)
    return cart_summary(cart), 200


@pos_bp.put("/cart/discount")
def set_discount_route():
    data = request.get_json(silent=True) or {}
    cart = load_cart()

    try:
        cart.set_discount(data.get("discount"))
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    save_cart(cart)
    return cart_summary(cart), 200


@pos_bp.delete("/cart")
def clear_cart_route():
    cart = load_cart()
    cart.clear()
    save_cart(cart)
    return cart_summary(cart), 200


@pos_bp.post("/checkout")
def checkout_route():
    """
    Commit the cart as a sale and decrement stock.

    Returns the sale (receipt data) and the emptied cart.
    """
    data = request.get_json(silent=True) or {}
    cart = load_cart()

    try:
        sale = checkout(cart, get_catalog(), payment_method=data.get("payment_method"))
    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details}), 500
    except Exception:
        current_app.logger.exception("Unexpected checkout failure")
        return jsonify({"error": "Checkout failed"}), 500

    save_cart(cart)
    return jsonify({"sale": sale.to_dict(), "cart": cart_summary(cart)}), 201
