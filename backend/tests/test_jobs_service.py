from datetime import date

import pytest

from commcentre.models import Job
from commcentre.services import jobs_service
from commcentre.services.jobs_service import (
    CANONICAL_STATUSES,
    classify,
    compute_balance,
    create_job,
    job_board,
    normalize_status,
    update_job,
)
from commcentre.validation import ValidationError


def _payload(**overrides):
    payload = {
        "customer_name": "Kamal Perera",
        "contact": "0771234567",
        "job_type": "Wedding Cards",
        "total_amount": "5000",
        "advance": "1000",
        "status": "Pending",
        "deadline": "2026-11-01",
    }
    payload.update(overrides)
    return payload


# --- pure helpers -------------------------------------------------------------

@pytest.mark.parametrize("status", CANONICAL_STATUSES)
def test_normalize_status_keeps_canonical_values(status):
    assert normalize_status(status) == status


def test_normalize_status_maps_legacy_printing_cutting():
    assert normalize_status("Printing/Cutting") == "Printing"


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_normalize_status_blank_defaults_to_pending(raw):
    assert normalize_status(raw) == "Pending"


def test_normalize_status_rejects_unknown():
    with pytest.raises(ValidationError):
        normalize_status("Shipped")


@pytest.mark.parametrize("stored, bucket", [
    ("Pending", "Pending"),
    ("Designing", "Designing"),
    ("Printing", "Printing"),
    ("Completed", "Completed"),
    ("Printing/Cutting", "Printing"),
    ("On Hold", "Pending"),
    (None, "Pending"),
])
def test_classify_buckets(stored, bucket):
    assert classify(stored) == bucket


@pytest.mark.parametrize("total, advance, expected", [
    ("5000", "1000", "4000.00"),
    (0, 0, "0.00"),
    ("1250.50", "250.25", "1000.25"),
    ("100", "150", "-50.00"),
    ("abc", "10", "-10.00"),
    ("1e30", "0", "0.00"),
    ("1000", "1e30", "1000.00"),
    (None, None, "0.00"),
])
def test_compute_balance(total, advance, expected):
    assert compute_balance(total, advance) == expected


# --- persistence ----------------------------------------------------------------

def test_create_job_scenario_balance(db_session):
    job = create_job(_payload())

    assert job.id is not None
    assert job.total_amount_cents == 500000
    assert job.advance_cents == 100000
    assert job.balance_cents == 400000
    assert jobs_service.job_to_dict(job)["balance"] == "4000.00"
    assert job.deadline == date(2026, 11, 1)
    assert job.date_created is not None


def test_create_job_unparseable_amounts_default_to_zero(db_session):
    job = create_job(_payload(total_amount="lots", advance=""))

    assert job.total_amount_cents == 0
    assert job.advance_cents == 0


def test_create_job_rejects_negative_amounts(db_session):
    with pytest.raises(ValidationError):
        create_job(_payload(advance="-1"))

    assert db_session.query(Job).count() == 0


@pytest.mark.parametrize("amount", ["1e30", "10000000", "9999999.995"])
def test_create_job_rejects_oversized_amounts(db_session, amount):
    with pytest.raises(ValidationError):
        create_job(_payload(total_amount=amount))

    assert db_session.query(Job).count() == 0


@pytest.mark.parametrize("field", ["customer_name", "job_type"])
def test_create_job_requires_fields(db_session, field):
    with pytest.raises(ValidationError) as excinfo:
        create_job(_payload(**{field: "  "}))

    assert field in excinfo.value.details["missing"]
    assert db_session.query(Job).count() == 0


def test_create_job_rejects_bad_deadline(db_session):
    with pytest.raises(ValidationError):
        create_job(_payload(deadline="next friday"))


def test_create_job_rejects_unknown_fields(db_session):
    with pytest.raises(ValidationError):
        create_job(_payload(balance="4000"))


def test_create_job_normalizes_legacy_status(db_session):
    job = create_job(_payload(status="Printing/Cutting"))

    assert job.status == "Printing"


def test_update_job_any_transition_allowed(db_session):
    job = create_job(_payload(status="Pending"))

    updated = update_job(job.id, _payload(status="Completed"))

    assert updated.status == "Completed"
    back = update_job(job.id, _payload(status="Designing"))
    assert back.status == "Designing"


def test_update_job_is_full_replacement(db_session):
    job = create_job(_payload())
    created_at = job.date_created

    updated = update_job(job.id, {"customer_name": "Saman", "job_type": "Banner"})

    assert updated.customer_name == "Saman"
    assert updated.contact is None
    assert updated.total_amount_cents == 0
    assert updated.advance_cents == 0
    assert updated.deadline is None
    assert updated.status == "Pending"
    assert updated.date_created == created_at


def test_update_job_recomputes_balance(db_session):
    job = create_job(_payload())

    updated = update_job(job.id, _payload(advance="4500"))

    assert updated.balance_cents == 50000


def test_update_missing_job_returns_none(db_session):
    assert update_job(12345, _payload()) is None


def test_legacy_status_is_classified_not_rewritten(db_session, make_job):
    job = make_job(status="Printing/Cutting")

    board = job_board()

    printing = next(c for c in board["columns"] if c["status"] == "Printing")
    assert [j["id"] for j in printing["jobs"]] == [job.id]
    assert printing["jobs"][0]["display_status"] == "Printing"
    db_session.expire_all()
    assert db_session.get(Job, job.id).status == "Printing/Cutting"


def test_legacy_status_saved_as_printing_on_edit(db_session, make_job):
    job = make_job(status="Printing/Cutting", total=800, advance=300)

    updated = update_job(job.id, _payload(status="Printing/Cutting", total_amount="800", advance="300"))

    assert updated.status == "Printing"
    db_session.expire_all()
    assert db_session.get(Job, job.id).status == "Printing"


def test_job_board_counts_every_job_once(db_session, make_job):
    make_job(status="Pending")
    make_job(status="Designing")
    make_job(status="Designing")
    make_job(status="Completed")
    make_job(status="Mystery")

    board = job_board()

    assert [c["status"] for c in board["columns"]] == list(CANONICAL_STATUSES)
    assert board["counts"] == {"Pending": 2, "Designing": 2, "Printing": 0, "Completed": 1}


def test_delete_job(db_session, make_job):
    job = make_job()

    assert jobs_service.delete_job(job.id) is True
    assert jobs_service.delete_job(job.id) is False
    assert db_session.query(Job).count() == 0
