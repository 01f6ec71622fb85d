# backend/tablebook/routers/schedule.py
# Weekly template: GET/PUT whole template. Special days: upsert by date, hard delete.

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.schedule import (
    SpecialDayRead,
    SpecialDayUpsert,
    TimeWindowSchema,
    WeeklyScheduleEntrySchema,
    WeeklyScheduleSchema,
)
from ..services.schedule import (
    ScheduleStore,
    SpecialDayOverride,
    TimeWindow,
    WeeklyScheduleEntry,
    format_time,
)
from .deps import HTTP_422

router = APIRouter(prefix="/settings", tags=["settings"])


def _window(data: Optional[TimeWindowSchema]) -> Optional[TimeWindow]:
    if data is None:
        return None
    return TimeWindow.parse(data.start, data.end)


def _window_schema(window: TimeWindow) -> TimeWindowSchema:
    return TimeWindowSchema(start=format_time(window.start), end=format_time(window.end))


def _weekly_schema(entries: tuple[WeeklyScheduleEntry, ...]) -> WeeklyScheduleSchema:
    return WeeklyScheduleSchema(entries=[
        WeeklyScheduleEntrySchema(
            weekday=e.weekday,
            is_open=e.is_open,
            lunch=_window_schema(e.lunch),
            dinner=_window_schema(e.dinner),
        )
        for e in entries
    ])


@router.get("/schedule", response_model=WeeklyScheduleSchema)
def get_weekly_schedule(db: Session = Depends(get_db)):
    return _weekly_schema(ScheduleStore(db).weekly_template())


@router.put("/schedule", response_model=WeeklyScheduleSchema)
def replace_weekly_schedule(data: WeeklyScheduleSchema, db: Session = Depends(get_db)):
    entries = [
        WeeklyScheduleEntry(
            weekday=e.weekday,
            is_open=e.is_open,
            lunch=_window(e.lunch),
            dinner=_window(e.dinner),
        )
        for e in data.entries
    ]
    try:
        saved = ScheduleStore(db).replace_weekly_template(entries)
    except ValueError as e:
        raise HTTPException(status_code=HTTP_422, detail=str(e))
    return _weekly_schema(saved)


@router.get("/special-days", response_model=list[SpecialDayRead])
def list_special_days(from_date: Optional[date] = None, db: Session = Depends(get_db)):
    return ScheduleStore(db).list_special_days(from_date)


@router.post("/special-days", response_model=SpecialDayRead)
def upsert_special_day(data: SpecialDayUpsert, db: Session = Depends(get_db)):
    override = SpecialDayOverride(
        date=data.date,
        is_closed=data.is_closed,
        lunch=_window(data.lunch),
        dinner=_window(data.dinner),
        lunch_closed=data.lunch_closed,
        dinner_closed=data.dinner_closed,
        note=data.note,
    )
    return ScheduleStore(db).upsert_special_day(override)


@router.delete("/special-days/{target_date}", status_code=status.HTTP_204_NO_CONTENT)
def delete_special_day(target_date: date, db: Session = Depends(get_db)):
    if not ScheduleStore(db).delete_special_day(target_date):
        raise HTTPException(status_code=404, detail="Not found")
