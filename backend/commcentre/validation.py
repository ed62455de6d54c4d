from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from commcentre.time_utils import parse_iso_date


# Maximum amount: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999

# Bound for quantities, deltas and stock; keeps line totals inside SQLite INTEGER
MAX_INTEGER = 1_000_000

_CENT = Decimal("0.01")
_MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def parse_amount_cents(value: Any, *, field_name: str = "amount") -> int:
    """
    Convert a user-supplied decimal amount ("12.50", 12.5, 12) to cents.

    Unparseable input counts as 0 so the caller always has a number to
    render. Negative or oversized amounts are rejected.
    """
    d = _to_decimal(value)
    if d is None:
        return 0
    if d < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    # Range check before quantize: huge exponents exceed the decimal context
    if d > _MAX_AMOUNT:
        raise ValidationError(f"{field_name} cannot exceed {MAX_AMOUNT_CENTS / 100:,.2f}")
    cents = int((d.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field_name} cannot exceed {MAX_AMOUNT_CENTS / 100:,.2f}")
    return cents


def lenient_amount_cents(value: Any) -> int:
    """Like parse_amount_cents, but negative or out-of-range input also counts as 0."""
    try:
        return parse_amount_cents(value)
    except ValidationError:
        return 0


def parse_int(value: Any, default: int = 0, *, field_name: str = "value") -> int:
    """
    Integer parse that mirrors a form field: "12", 12, "12.9" -> 12.
    Anything unparseable returns default; magnitudes above MAX_INTEGER
    are rejected.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        d = Decimal(value)
    else:
        d = _to_decimal(value)
        if d is None:
            return default
    if abs(d) > MAX_INTEGER:
        raise ValidationError(f"{field_name} must be between -{MAX_INTEGER:,} and {MAX_INTEGER:,}")
    return int(d)


def format_cents(cents: int) -> str:
    """Render cents as a two-decimal string (e.g. 400050 -> "4000.50")."""
    return str((Decimal(cents) / 100).quantize(_CENT))


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields that must be present and non-blank
    - amount_fields: payload key -> cents column key (lenient decimal parse)
    - integer_fields: lenient integer parse, 0 on failure
    - defaults: values used for writable fields omitted from a payload
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    amount_fields: dict[str, str] = field(default_factory=dict)
    integer_fields: set[str] = field(default_factory=set)
    defaults: dict[str, Any] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Date):
        if isinstance(value, date):
            return parse_iso_date(value)
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)")

    if isinstance(coltype, Integer):
        return parse_int(value, field_name=col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create

    Returns a complete replacement dict keyed by column name: every writable
    field is present, omitted ones take their policy default.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    missing = sorted(
        f for f in policy.required_on_create
        if payload.get(f) is None or str(payload.get(f)).strip() == ""
    )
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            details={"missing": missing},
        )

    cols = _columns_by_key(model)
    patch: dict = {}

    for k in sorted(policy.writable_fields):
        raw = payload.get(k)
        if raw is None or (isinstance(raw, str) and raw.strip() == ""):
            raw = policy.defaults.get(k, raw)

        if k in policy.amount_fields:
            patch[policy.amount_fields[k]] = parse_amount_cents(raw, field_name=k)
            continue

        if k in policy.integer_fields:
            patch[k] = parse_int(raw, field_name=k)
            continue

        col = cols.get(k)
        if col is None:
            raise ValidationError(f"Unknown field: {k}")

        val = _coerce_value(col, raw)

        # Blank strings: null for nullable columns, rejected otherwise
        if isinstance(col.type, (String, Text)) and val == "":
            val = None
        if val is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be blank")
            patch[k] = None
            continue

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch
