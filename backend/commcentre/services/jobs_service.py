# Overview: Service-layer operations for print jobs; status vocabulary, balances and persistence.

from __future__ import annotations

from typing import Any

from flask import current_app

from ..extensions import db
from ..models import Job
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    format_cents,
    lenient_amount_cents,
    validate_payload,
)
from commcentre.time_utils import utcnow

STATUS_PENDING = "Pending"
STATUS_DESIGNING = "Designing"
STATUS_PRINTING = "Printing"
STATUS_COMPLETED = "Completed"

# Board column order
CANONICAL_STATUSES = (STATUS_PENDING, STATUS_DESIGNING, STATUS_PRINTING, STATUS_COMPLETED)
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_DESIGNING, STATUS_PRINTING)

# Values written by older versions of the job form
LEGACY_STATUS_ALIASES = {
    "Printing/Cutting": STATUS_PRINTING,
}

JOB_POLICY = ModelValidationPolicy(
    writable_fields={
        "customer_name", "contact", "job_type",
        "total_amount", "advance", "deadline",
    },
    required_on_create={"customer_name", "job_type"},
    amount_fields={
        "total_amount": "total_amount_cents",
        "advance": "advance_cents",
    },
)


def normalize_status(value: Any) -> str:
    """
    Map input to a canonical status for storage.

    Blank -> Pending; legacy aliases -> their canonical value;
    anything else is rejected.
    """
    if value is None or str(value).strip() == "":
        return STATUS_PENDING
    status = str(value).strip()
    status = LEGACY_STATUS_ALIASES.get(status, status)
    if status not in CANONICAL_STATUSES:
        raise ValidationError(
            f"status must be one of: {', '.join(CANONICAL_STATUSES)}",
            details={"status": value},
        )
    return status


def classify(status: Any) -> str:
    """
    Display bucket for a stored status. Legacy aliases map to their
    canonical value; anything unrecognized falls back to Pending.
    Read-only: the stored value is never touched.
    """
    if isinstance(status, Job):
        status = status.status
    status = LEGACY_STATUS_ALIASES.get(status, status)
    if status in CANONICAL_STATUSES:
        return status
    return STATUS_PENDING


def compute_balance(total: Any, advance: Any) -> str:
    """Outstanding balance as a two-decimal string; unparseable input is 0."""
    return format_cents(lenient_amount_cents(total) - lenient_amount_cents(advance))


def job_to_dict(job: Job) -> dict:
    data = job.to_dict()
    data["balance"] = format_cents(job.balance_cents)
    data["display_status"] = classify(job.status)
    return data


def _validated_fields(payload: dict) -> dict:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    # status has its own vocabulary, validated outside the column policy
    payload = dict(payload)
    status = payload.pop("status", None)

    fields = validate_payload(model=Job, payload=payload, policy=JOB_POLICY)
    fields["status"] = normalize_status(status)
    return fields


def get_job(job_id: int) -> Job | None:
    return db.session.get(Job, job_id)


def list_jobs(status: str | None = None) -> list[Job]:
    """All jobs, newest first; status filters on the stored value."""
    query = db.session.query(Job)
    if status:
        query = query.filter(Job.status == status)
    return query.order_by(Job.date_created.desc(), Job.id.desc()).all()


def create_job(payload: dict) -> Job:
    """
    Validate and insert a new job.

    Raises:
        ValidationError: missing customer_name/job_type, negative amounts,
            unknown status or malformed deadline
    """
    fields = _validated_fields(payload)

    job = Job(date_created=utcnow(), **fields)
    db.session.add(job)
    db.session.commit()

    current_app.logger.info("Created job id=%s status=%s", job.id, job.status)
    return job


def update_job(job_id: int, payload: dict) -> Job | None:
    """
    Replace every editable field of a job (no partial patch, no version
    check). Any status may move to any other. date_created is kept.

    Returns None if the job does not exist.
    """
    fields = _validated_fields(payload)

    job = get_job(job_id)
    if not job:
        return None

    previous = job.status
    for k, v in fields.items():
        setattr(job, k, v)
    db.session.commit()

    if previous != job.status:
        current_app.logger.info(
            "Job id=%s status %s -> %s", job.id, previous, job.status
        )
    return job


def delete_job(job_id: int) -> bool:
    job = get_job(job_id)
    if not job:
        return False
    db.session.delete(job)
    db.session.commit()
    return True


def job_board(jobs: list[Job] | None = None) -> dict:
    """
    Kanban data: one column per canonical status, in board order, with the
    jobs classified into it and a count.
    """
    if jobs is None:
        jobs = list_jobs()

    columns: dict[str, list[dict]] = {status: [] for status in CANONICAL_STATUSES}
    for job in jobs:
        columns[classify(job.status)].append(job_to_dict(job))

    return {
        "columns": [
            {"status": status, "count": len(columns[status]), "jobs": columns[status]}
            for status in CANONICAL_STATUSES
        ],
        "counts": {status: len(columns[status]) for status in CANONICAL_STATUSES},
    }
