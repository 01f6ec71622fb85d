# backend/tablebook/services/reservations/errors.py
"""
Reservation error taxonomy.

Every error carries a machine-readable `reason` so the HTTP layer and
clients can tell them apart without parsing messages.
"""


class ReservationError(Exception):
    reason = "reservation_error"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason


class ValidationError(ReservationError):
    """Malformed request or slot not offered by the current schedule."""
    reason = "invalid_request"


class CapacityExceededError(ReservationError):
    """Slot is full. Callers should re-query availability before retrying."""
    reason = "capacity_exceeded"


class NotFoundError(ReservationError):
    reason = "not_found"


class InvalidTransitionError(ReservationError):
    """Status change not allowed by the reservation state machine."""
    reason = "invalid_transition"


class StorageUnavailable(ReservationError):
    """Storage failed; the operation was rolled back and nothing was written."""
    reason = "storage_unavailable"
