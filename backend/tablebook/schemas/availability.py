# backend/tablebook/schemas/availability.py
"""
Pydantic schemas for availability API.
"""

from typing import Optional
from pydantic import BaseModel, Field


class SlotRead(BaseModel):
    time: str = Field(description="HH:MM")
    shift: str
    available: bool
    occupied: int
    capacity: int
    is_past: bool

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    date: str
    closed: bool
    message: Optional[str] = None
    slots: list[SlotRead]

    model_config = {"from_attributes": True}
