# backend/tablebook/services/reservations/__init__.py
"""
Reservation ledger: state machine and capacity-safe creation.
"""

from .errors import (
    CapacityExceededError,
    InvalidTransitionError,
    NotFoundError,
    ReservationError,
    StorageUnavailable,
    ValidationError,
)
from .validation import ReservationRequest, validate_request
from .ledger import (
    ALLOWED_TRANSITIONS,
    EVENT_CREATED,
    EVENT_STATUS_CHANGED,
    ReservationLedger,
    ReservationStatus,
)

__all__ = [
    "CapacityExceededError",
    "InvalidTransitionError",
    "NotFoundError",
    "ReservationError",
    "StorageUnavailable",
    "ValidationError",
    "ReservationRequest",
    "validate_request",
    "ALLOWED_TRANSITIONS",
    "EVENT_CREATED",
    "EVENT_STATUS_CHANGED",
    "ReservationLedger",
    "ReservationStatus",
]
