# Overview: Flask API routes for committed sales (history and receipts).

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Sale
from ..services.reporting_service import recent_sales

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")

MAX_SALES_LIMIT = 100


@sales_bp.get("")
def list_sales_route():
    """Most recent sales first. Query params: limit (default 20, max 100)."""
    limit = request.args.get("limit", default=20, type=int)
    limit = min(max(limit, 1), MAX_SALES_LIMIT)

    sales = recent_sales(limit)
    return jsonify({
        "items": [s.to_dict(include_items=False) for s in sales],
        "count": len(sales),
    }), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    """Sale with its line snapshots (receipt data)."""
    sale = db.session.get(Sale, sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404

    return jsonify({"sale": sale.to_dict()}), 200
