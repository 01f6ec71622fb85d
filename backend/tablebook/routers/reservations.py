# backend/tablebook/routers/reservations.py
"""
Public reservation endpoint.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.reservations import ReservationCreate, ReservationCreated
from ..services.reservations import ReservationError, ReservationLedger, ReservationRequest
from .deps import get_notifier, to_http_error

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationCreated, status_code=status.HTTP_201_CREATED)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    notify=Depends(get_notifier),
):
    ledger = ReservationLedger(db, notify=notify)
    try:
        reservation = ledger.create(ReservationRequest(**data.model_dump()))
    except ReservationError as e:
        raise to_http_error(e)

    return ReservationCreated(id=reservation.id, status=reservation.status)
