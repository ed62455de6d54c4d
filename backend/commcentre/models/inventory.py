from __future__ import annotations

from ..extensions import db
from commcentre.time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Product master data (stationery, services and custom-job templates).

    Prices are stored in cents. stock_quantity has no floor: a sale can drive
    it negative, which is how service items with nominal stock behave.

    Sales never reference a product row directly; they keep a snapshot of
    name and price, so deleting a product is a plain hard delete.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    barcode = db.Column(db.String(64), nullable=True, index=True)
    category = db.Column(db.String(64), nullable=False, default="General")

    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    selling_price_cents = db.Column(db.Integer, nullable=False, default=0)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0, index=True)

    date_added = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "category": self.category,
            "cost_price_cents": self.cost_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "stock_quantity": self.stock_quantity,
            "date_added": to_utc_z(self.date_added),
        }
