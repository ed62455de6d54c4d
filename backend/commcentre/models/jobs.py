from __future__ import annotations

from ..extensions import db
from commcentre.time_utils import to_iso_date, to_utc_z, utcnow


class Job(db.Model):
    """
    Custom print job (wedding cards, banners, binding orders...).

    status holds whatever was last saved. Rows written by older versions may
    still carry "Printing/Cutting"; reads classify it without rewriting it.
    """
    __tablename__ = "jobs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(128), nullable=False)
    contact = db.Column(db.String(64), nullable=True)
    job_type = db.Column(db.String(128), nullable=False)

    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    advance_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(32), nullable=False, default="Pending", index=True)
    deadline = db.Column(db.Date, nullable=True)

    date_created = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def balance_cents(self) -> int:
        return (self.total_amount_cents or 0) - (self.advance_cents or 0)

    def __repr__(self) -> str:
        return f"<Job id={self.id} customer={self.customer_name!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "contact": self.contact,
            "job_type": self.job_type,
            "total_amount_cents": self.total_amount_cents,
            "advance_cents": self.advance_cents,
            "balance_cents": self.balance_cents,
            "status": self.status,
            "deadline": to_iso_date(self.deadline),
            "date_created": to_utc_z(self.date_created),
        }
