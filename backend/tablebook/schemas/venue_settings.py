# backend/tablebook/schemas/venue_settings.py

from typing import Optional
from pydantic import BaseModel, Field


class SmtpSettings(BaseModel):
    host: str = ""
    port: int = Field(587, ge=1, le=65535)
    user: str = ""
    # Write-only: omitted keeps the stored password
    password: Optional[str] = None


class SmtpSettingsRead(BaseModel):
    host: str
    port: int
    user: str
    has_password: bool


class EmailTemplatesSchema(BaseModel):
    subject_pending: str = ""
    template_pending: str = ""
    subject_confirmed: str = ""
    template_confirmed: str = ""
    subject_canceled: str = ""
    template_canceled: str = ""


class VenueSettingsUpdate(BaseModel):
    restaurant_name: str = ""
    address: str = ""
    admin_email: str = ""
    slot_interval_minutes: int = Field(30, ge=5, le=240)
    slot_capacity: int = Field(10, ge=0)
    templates: EmailTemplatesSchema = EmailTemplatesSchema()
    smtp: SmtpSettings = SmtpSettings()


class VenueSettingsRead(BaseModel):
    restaurant_name: str
    address: str
    admin_email: str
    slot_interval_minutes: int
    slot_capacity: int
    templates: EmailTemplatesSchema
    smtp: SmtpSettingsRead
