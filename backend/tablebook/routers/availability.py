# backend/tablebook/routers/availability.py
"""
Availability API: bookable slots for one date.
"""

import re
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.availability import AvailabilityResponse, SlotRead
from ..services.schedule import format_time
from ..services.slots import calculate_availability

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=AvailabilityResponse)
def get_availability(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise HTTPException(status_code=400, detail="Date is required (YYYY-MM-DD)")
    try:
        target_date = date.fromisoformat(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date is required (YYYY-MM-DD)")

    result = calculate_availability(db, target_date)

    return AvailabilityResponse(
        date=target_date.isoformat(),
        closed=result.closed,
        message=result.message,
        slots=[
            SlotRead(
                time=format_time(slot.time),
                shift=slot.shift.value,
                available=slot.available,
                occupied=slot.occupied,
                capacity=slot.capacity,
                is_past=slot.is_past,
            )
            for slot in result.slots
        ],
    )
