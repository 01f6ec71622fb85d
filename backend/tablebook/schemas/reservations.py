# backend/tablebook/schemas/reservations.py

import re
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class ReservationCreate(BaseModel):
    date: str = Field(description="Date in YYYY-MM-DD format")
    time_slot: str = Field(description="Time in HH:MM format")
    shift: Literal["LUNCH", "DINNER"]
    guests: int = Field(ge=1, le=20)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    allergies: Optional[str] = None
    notes: Optional[str] = None

    idempotency_key: Optional[str] = Field(
        None, max_length=128, description="Client token, repeated on retries"
    )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        if not re.match(r"^\d{4}-\d{2}-\d{2}$", v):
            raise ValueError("Date must be in YYYY-MM-DD format")
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise ValueError("Date must be a valid calendar date")
        return v

    @field_validator("time_slot")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not re.match(r"^\d{2}:\d{2}$", v):
            raise ValueError("Time must be in HH:MM format")
        return v


class ReservationCreated(BaseModel):
    id: str
    status: str = "PENDING"


class ReservationStatusUpdate(BaseModel):
    status: Literal["PENDING", "CONFIRMED", "CANCELED"]


class ReservationRead(BaseModel):
    id: str

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

    status: str
    email_sent: bool

    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}
