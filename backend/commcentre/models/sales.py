from __future__ import annotations

from ..extensions import db
from commcentre.time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    Committed checkout.

    Immutable once written: there is no edit or refund path. total_amount_cents
    is stored exactly as sub_total - discount, even when that is negative;
    clamping at zero is a display concern.
    """
    __tablename__ = "sales"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    # Sole time-range query key (dashboard, daily report)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    sub_total_cents = db.Column(db.Integer, nullable=False)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_amount_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total_cents={self.total_amount_cents}>"

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "date": to_utc_z(self.date),
            "sub_total_cents": self.sub_total_cents,
            "discount_cents": self.discount_cents,
            "total_amount_cents": self.total_amount_cents,
            "display_total_cents": max(self.total_amount_cents, 0),
            "payment_method": self.payment_method,
            "item_count": len(self.lines),
        }
        if include_items:
            data["items"] = [line.to_dict() for line in self.lines]
        return data


class SaleLine(db.Model):
    """Snapshot of one cart line at commit time."""
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    # Weak reference: the product may be deleted later
    product_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }
