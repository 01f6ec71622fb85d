# backend/tablebook/services/venue_settings.py
"""
Venue configuration.

Stored as a single `venue_settings` row and read per request into frozen
dataclasses. Environment defaults apply until staff save the row.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import VenueSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    """Mailer-owned block, passed through untouched by the scheduling core."""
    host: str = ""
    port: int = 587
    user: str = ""
    password: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.user and self.password)


@dataclass(frozen=True)
class EmailTemplates:
    subject_pending: str = ""
    template_pending: str = ""
    subject_confirmed: str = ""
    template_confirmed: str = ""
    subject_canceled: str = ""
    template_canceled: str = ""


@dataclass(frozen=True)
class VenueConfig:
    restaurant_name: str = ""
    address: str = ""
    admin_email: str = ""
    slot_interval_minutes: int = 30
    slot_capacity: int = 10
    templates: EmailTemplates = field(default_factory=EmailTemplates)
    smtp: SmtpConfig = field(default_factory=SmtpConfig)

    def __post_init__(self):
        if self.slot_interval_minutes <= 0:
            raise ValueError(f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}")
        if self.slot_capacity < 0:
            raise ValueError(f"slot_capacity must not be negative, got {self.slot_capacity}")


def default_venue_config() -> VenueConfig:
    return VenueConfig(
        slot_interval_minutes=settings.default_slot_interval,
        slot_capacity=settings.default_slot_capacity,
    )


def _get_row(db: Session) -> Optional[VenueSettings]:
    return db.query(VenueSettings).order_by(VenueSettings.id.asc()).first()


def venue_config_from_row(row: VenueSettings) -> VenueConfig:
    return VenueConfig(
        restaurant_name=row.restaurant_name or "",
        address=row.address or "",
        admin_email=row.admin_email or "",
        slot_interval_minutes=row.slot_interval_minutes or settings.default_slot_interval,
        slot_capacity=(
            row.slot_capacity if row.slot_capacity is not None
            else settings.default_slot_capacity
        ),
        templates=EmailTemplates(
            subject_pending=row.email_subject_pending or "",
            template_pending=row.email_template_pending or "",
            subject_confirmed=row.email_subject_confirmed or "",
            template_confirmed=row.email_template_confirmed or "",
            subject_canceled=row.email_subject_canceled or "",
            template_canceled=row.email_template_canceled or "",
        ),
        smtp=SmtpConfig(
            host=(row.smtp_host or "").strip(),
            port=row.smtp_port or 587,
            user=(row.smtp_user or "").strip(),
            password=(row.smtp_pass or "").strip(),
        ),
    )


def load_venue_config(db: Session) -> VenueConfig:
    row = _get_row(db)
    if row is None:
        return default_venue_config()
    return venue_config_from_row(row)


def save_venue_config(db: Session, config: VenueConfig) -> VenueConfig:
    """Replace the singleton settings row with `config`."""
    row = _get_row(db)
    if row is None:
        row = VenueSettings()
        db.add(row)

    row.restaurant_name = config.restaurant_name
    row.address = config.address
    row.admin_email = config.admin_email
    row.slot_interval_minutes = config.slot_interval_minutes
    row.slot_capacity = config.slot_capacity

    row.email_subject_pending = config.templates.subject_pending
    row.email_template_pending = config.templates.template_pending
    row.email_subject_confirmed = config.templates.subject_confirmed
    row.email_template_confirmed = config.templates.template_confirmed
    row.email_subject_canceled = config.templates.subject_canceled
    row.email_template_canceled = config.templates.template_canceled

    row.smtp_host = config.smtp.host
    row.smtp_port = config.smtp.port
    row.smtp_user = config.smtp.user
    row.smtp_pass = config.smtp.password
    row.updated_at = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")

    db.commit()
    logger.info(
        f"Venue settings saved: interval={config.slot_interval_minutes}, "
        f"capacity={config.slot_capacity}"
    )
    return venue_config_from_row(row)
