# Overview: Full-database snapshot for backups (read-only).

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import Job, Product, Sale
from commcentre.time_utils import to_utc_z, utcnow


def export_snapshot() -> dict:
    """All products, sales (with items) and jobs as plain data."""
    products = db.session.query(Product).order_by(Product.id.asc()).all()
    sales = db.session.query(Sale).order_by(Sale.id.asc()).all()
    jobs = db.session.query(Job).order_by(Job.id.asc()).all()

    return {
        "exported_at": to_utc_z(utcnow()),
        "products": [p.to_dict() for p in products],
        "sales": [s.to_dict() for s in sales],
        "jobs": [j.to_dict() for j in jobs],
    }


def backup_filename(today: date | None = None) -> str:
    today = today or utcnow().date()
    prefix = current_app.config.get("BACKUP_FILENAME_PREFIX", "CommCentre_Backup")
    return f"{prefix}_{today.isoformat()}.json"
