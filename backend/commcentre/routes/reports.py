# Overview: Flask API routes for reporting and analytics.

from flask import Blueprint, request

from ..services import reporting_service
from commcentre.time_utils import parse_iso_date, utcnow

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
def dashboard_route():
    return reporting_service.dashboard_summary()


@reports_bp.get("/daily")
def daily_route():
    """Daily sales report. Query params: date=YYYY-MM-DD (default: today, UTC)."""
    try:
        day = parse_iso_date(request.args.get("date"))
    except ValueError:
        return {"error": "date must be an ISO-8601 date (YYYY-MM-DD)"}, 400

    return reporting_service.daily_report(day or utcnow().date())
