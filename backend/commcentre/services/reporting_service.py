# Overview: Service-layer operations for reporting; dashboard summary and daily sales report.

from __future__ import annotations

from datetime import date, datetime

from flask import current_app
from sqlalchemy import func

from commcentre.extensions import db
from commcentre.models import Job, Product, Sale
from commcentre.services.jobs_service import (
    ACTIVE_STATUSES,
    STATUS_COMPLETED,
    STATUS_PENDING,
    job_to_dict,
)
from commcentre.time_utils import day_bounds, to_utc_z, utcnow

RECENT_SALES_LIMIT = 5
ACTIVE_JOBS_LIMIT = 5


def recent_sales(limit: int = RECENT_SALES_LIMIT) -> list[Sale]:
    return (
        db.session.query(Sale)
        .order_by(Sale.date.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def dashboard_summary(now: datetime | None = None) -> dict:
    """
    Headline numbers for the dashboard.

    Job counts match the stored status exactly, so legacy values are not
    counted as Pending here (the board classifies them instead).
    """
    now = now or utcnow()
    start_of_day, _ = day_bounds(now.date())
    threshold = current_app.config["LOW_STOCK_THRESHOLD"]

    sales_today_cents = (
        db.session.query(func.coalesce(func.sum(Sale.total_amount_cents), 0))
        .filter(Sale.date >= start_of_day)
        .scalar()
    )

    pending_jobs = db.session.query(Job).filter(Job.status == STATUS_PENDING).count()
    completed_jobs = db.session.query(Job).filter(Job.status == STATUS_COMPLETED).count()
    low_stock = db.session.query(Product).filter(Product.stock_quantity < threshold).count()

    active_jobs = (
        db.session.query(Job)
        .filter(Job.status.in_(ACTIVE_STATUSES))
        .order_by(Job.id.asc())
        .limit(ACTIVE_JOBS_LIMIT)
        .all()
    )

    return {
        "date": now.date().isoformat(),
        "sales_today_cents": int(sales_today_cents or 0),
        "pending_jobs": pending_jobs,
        "completed_jobs": completed_jobs,
        "low_stock_products": low_stock,
        "low_stock_threshold": threshold,
        "recent_sales": [s.to_dict(include_items=False) for s in recent_sales()],
        "active_jobs": [job_to_dict(j) for j in active_jobs],
    }


def daily_report(day: date) -> dict:
    """
    Revenue, sale count and an estimated profit for one UTC day.

    Sales do not snapshot cost, so cost is estimated from each product's
    current cost price; lines whose product was deleted contribute 0.
    """
    start, end = day_bounds(day)
    sales = (
        db.session.query(Sale)
        .filter(Sale.date >= start, Sale.date <= end)
        .order_by(Sale.date.asc(), Sale.id.asc())
        .all()
    )

    revenue = sum(s.total_amount_cents for s in sales)

    costs: dict[int, int | None] = {}
    total_cost = 0
    for sale in sales:
        for line in sale.lines:
            if line.product_id not in costs:
                product = db.session.get(Product, line.product_id)
                costs[line.product_id] = product.cost_price_cents if product else None
            unit_cost = costs[line.product_id]
            if unit_cost is not None:
                total_cost += unit_cost * line.quantity

    return {
        "date": day.isoformat(),
        "revenue_cents": revenue,
        "sales_count": len(sales),
        "estimated_cost_cents": total_cost,
        "estimated_profit_cents": revenue - total_cost,
        "transactions": [
            {
                "sale_id": s.id,
                "time": to_utc_z(s.date),
                "total_amount_cents": s.total_amount_cents,
                "item_count": len(s.lines),
            }
            for s in sales
        ],
    }
