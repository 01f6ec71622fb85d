# backend/tablebook/services/reservations/validation.py

import re
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from ..schedule import Shift, parse_time
from .errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")

MIN_GUESTS = 1
MAX_GUESTS = 20


@dataclass(frozen=True)
class ReservationRequest:
    date: str
    time_slot: str
    shift: str
    guests: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    allergies: Optional[str] = None
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class ValidRequest:
    """Request with parsed date, time and shift."""
    request: ReservationRequest
    date: date
    time_slot: time
    shift: Shift


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_request(request: ReservationRequest) -> ValidRequest:
    if not isinstance(request.date, str) or not DATE_RE.match(request.date):
        raise ValidationError("Date must be in YYYY-MM-DD format", reason="invalid_date")
    try:
        target_date = date.fromisoformat(request.date)
    except ValueError:
        raise ValidationError(f"Not a calendar date: {request.date}", reason="invalid_date")

    if not isinstance(request.time_slot, str) or not TIME_RE.match(request.time_slot):
        raise ValidationError("Time must be in HH:MM format", reason="invalid_time")
    try:
        time_slot = parse_time(request.time_slot)
    except ValueError:
        raise ValidationError(f"Not a time of day: {request.time_slot}", reason="invalid_time")

    try:
        shift = Shift(request.shift)
    except ValueError:
        raise ValidationError(f"Unknown shift: {request.shift}", reason="invalid_shift")

    if (
        isinstance(request.guests, bool)
        or not isinstance(request.guests, int)
        or not MIN_GUESTS <= request.guests <= MAX_GUESTS
    ):
        raise ValidationError(
            f"Guests must be between {MIN_GUESTS} and {MAX_GUESTS}",
            reason="invalid_guests",
        )

    first_name = (request.first_name or "").strip()
    last_name = (request.last_name or "").strip()
    if not first_name:
        raise ValidationError("First name is required", reason="invalid_name")
    if not last_name:
        raise ValidationError("Last name is required", reason="invalid_name")

    try:
        email = validate_email((request.email or "").strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", reason="invalid_email")

    cleaned = ReservationRequest(
        date=request.date,
        time_slot=request.time_slot,
        shift=shift.value,
        guests=request.guests,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=_optional_text(request.phone),
        allergies=_optional_text(request.allergies),
        notes=_optional_text(request.notes),
        idempotency_key=_optional_text(request.idempotency_key),
    )
    return ValidRequest(request=cleaned, date=target_date, time_slot=time_slot, shift=shift)
