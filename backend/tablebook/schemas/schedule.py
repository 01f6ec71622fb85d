# backend/tablebook/schemas/schedule.py

import re
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class TimeWindowSchema(BaseModel):
    start: str = Field(description="HH:MM")
    end: str = Field(description="HH:MM")

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not TIME_RE.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def check_order(self):
        if self.start > self.end:
            raise ValueError("Window start must not be after its end")
        return self


class WeeklyScheduleEntrySchema(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    is_open: bool
    lunch: TimeWindowSchema
    dinner: TimeWindowSchema


class WeeklyScheduleSchema(BaseModel):
    entries: list[WeeklyScheduleEntrySchema]

    @field_validator("entries")
    @classmethod
    def one_entry_per_weekday(cls, v: list[WeeklyScheduleEntrySchema]) -> list[WeeklyScheduleEntrySchema]:
        if sorted(e.weekday for e in v) != list(range(7)):
            raise ValueError("Exactly seven entries are required, one per weekday 0..6")
        return sorted(v, key=lambda e: e.weekday)


class SpecialDayUpsert(BaseModel):
    date: date
    is_closed: bool = False
    lunch_closed: bool = False
    dinner_closed: bool = False
    lunch: Optional[TimeWindowSchema] = None
    dinner: Optional[TimeWindowSchema] = None
    note: Optional[str] = None


class SpecialDayRead(BaseModel):
    id: int
    date: str
    is_closed: bool
    lunch_closed: bool
    dinner_closed: bool
    lunch_start: Optional[str] = None
    lunch_end: Optional[str] = None
    dinner_start: Optional[str] = None
    dinner_end: Optional[str] = None
    note: Optional[str] = None

    model_config = {"from_attributes": True}
