
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..services.events import emit_event
from ..services.notifications.mailer import open_smtp
from ..services.reservations import (
    CapacityExceededError,
    InvalidTransitionError,
    NotFoundError,
    ReservationError,
    StorageUnavailable,
    ValidationError,
)

HTTP_422 = 422

ERROR_STATUS = {
    ValidationError: HTTP_422,
    CapacityExceededError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Request body field → reason reported when the schema rejects it
FIELD_REASONS = {
    "date": "invalid_date",
    "time_slot": "invalid_time",
    "shift": "invalid_shift",
    "guests": "invalid_guests",
    "first_name": "invalid_name",
    "last_name": "invalid_name",
    "email": "invalid_email",
    "status": "invalid_status",
}


def get_notifier():
    """Event sink for reservation notifications (overridden in tests)."""
    return emit_event


def get_smtp_factory():
    """SMTP connection factory for staff mail actions (overridden in tests)."""
    return open_smtp


def to_http_error(error: ReservationError) -> HTTPException:
    code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(
        status_code=code,
        detail={"reason": error.reason, "message": error.message},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema errors get the same {reason, message} detail as service errors."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = tuple(first.get("loc", ()))
    reason = "invalid_request"
    if len(loc) >= 2 and loc[0] == "body":
        reason = FIELD_REASONS.get(loc[1], reason)
    return JSONResponse(
        status_code=HTTP_422,
        content={
            "detail": {
                "reason": reason,
                "message": first.get("msg", "Invalid request"),
                "errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                    for e in errors
                ],
            }
        },
    )


MAIL_ERROR_STATUS = {
    "reservation_not_found": status.HTTP_404_NOT_FOUND,
    "smtp_not_configured": HTTP_422,
}


def to_mail_http_error(result: dict) -> HTTPException:
    """Failed mail result → HTTP error; delivery problems are reported as 502."""
    reason = result.get("reason") or "send_failed"
    return HTTPException(
        status_code=MAIL_ERROR_STATUS.get(reason, status.HTTP_502_BAD_GATEWAY),
        detail={"reason": reason, "message": f"Email not sent: {reason}"},
    )
