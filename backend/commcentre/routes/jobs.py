# Overview: Flask API routes for print jobs and the kanban board.

from flask import Blueprint, request

from ..services import jobs_service
from ..validation import ValidationError

jobs_bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


@jobs_bp.get("")
def list_jobs_route():
    """List jobs, newest first. Query params: status (stored value, optional)."""
    jobs = jobs_service.list_jobs(status=request.args.get("status"))
    return {
        "items": [jobs_service.job_to_dict(j) for j in jobs],
        "count": len(jobs),
    }


@jobs_bp.get("/board")
def board_route():
    return jobs_service.job_board()


@jobs_bp.get("/balance")
def balance_route():
    """Live balance for the job form: ?total=...&advance=..."""
    return {
        "balance": jobs_service.compute_balance(
            request.args.get("total"), request.args.get("advance")
        )
    }


@jobs_bp.post("")
def create_job_route():
    payload = request.get_json(silent=True) or {}

    try:
        job = jobs_service.create_job(payload)
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    return jobs_service.job_to_dict(job), 201


@jobs_bp.get("/<int:job_id>")
def get_job_route(job_id: int):
    job = jobs_service.get_job(job_id)
    if not job:
        return {"error": "Job not found"}, 404
    return jobs_service.job_to_dict(job), 200


@jobs_bp.put("/<int:job_id>")
def update_job_route(job_id: int):
    """Replace a job. Any status may be set directly."""
    payload = request.get_json(silent=True) or {}

    try:
        job = jobs_service.update_job(job_id, payload)
    except ValidationError as e:
        return {"error": str(e), "details": e.details}, 400

    if not job:
        return {"error": "Job not found"}, 404

    return jobs_service.job_to_dict(job), 200


@jobs_bp.delete("/<int:job_id>")
def delete_job_route(job_id: int):
    if not jobs_service.delete_job(job_id):
        return {"error": "Job not found"}, 404
    return {"ok": True}, 200
