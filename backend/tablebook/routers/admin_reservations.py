# backend/tablebook/routers/admin_reservations.py
# Staff endpoints; authentication is enforced in front of the service.

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.reservations import ReservationRead, ReservationStatusUpdate
from ..services.notifications import send_reservation_email
from ..services.reservations import ReservationError, ReservationLedger
from .deps import get_notifier, get_smtp_factory, to_http_error, to_mail_http_error

router = APIRouter(prefix="/admin/reservations", tags=["admin"])


@router.get("", response_model=list[ReservationRead])
def list_reservations(
    status: Optional[str] = None,
    date_str: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    return ReservationLedger(db).list_reservations(status=status, target_date=date_str)


@router.get("/{id}", response_model=ReservationRead)
def get_reservation(id: str, db: Session = Depends(get_db)):
    try:
        return ReservationLedger(db).get(id)
    except ReservationError as e:
        raise to_http_error(e)


@router.patch("/{id}", response_model=ReservationRead)
def update_reservation_status(
    id: str,
    data: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    notify=Depends(get_notifier),
):
    ledger = ReservationLedger(db, notify=notify)
    try:
        return ledger.set_status(id, data.status)
    except ReservationError as e:
        raise to_http_error(e)


@router.post("/{id}/resend-email")
def resend_reservation_email(
    id: str,
    db: Session = Depends(get_db),
    smtp_factory=Depends(get_smtp_factory),
):
    """Send the guest email for the reservation's current status again."""
    try:
        reservation = ReservationLedger(db).get(id)
    except ReservationError as e:
        raise to_http_error(e)

    result = send_reservation_email(db, reservation.id, reservation.status, smtp_factory=smtp_factory)
    if not result["success"]:
        raise to_mail_http_error(result)
    return {"id": reservation.id, "status": reservation.status, "email_sent": True}
