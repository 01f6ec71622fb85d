# backend/tablebook/routers/venue_settings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.venue_settings import (
    EmailTemplatesSchema,
    SmtpSettingsRead,
    VenueSettingsRead,
    VenueSettingsUpdate,
)
from ..services.notifications import send_test_email
from ..services.venue_settings import (
    EmailTemplates,
    SmtpConfig,
    VenueConfig,
    load_venue_config,
    save_venue_config,
)
from .deps import get_smtp_factory, to_mail_http_error

router = APIRouter(prefix="/settings/venue", tags=["settings"])


def _to_read(config: VenueConfig) -> VenueSettingsRead:
    t = config.templates
    return VenueSettingsRead(
        restaurant_name=config.restaurant_name,
        address=config.address,
        admin_email=config.admin_email,
        slot_interval_minutes=config.slot_interval_minutes,
        slot_capacity=config.slot_capacity,
        templates=EmailTemplatesSchema(
            subject_pending=t.subject_pending,
            template_pending=t.template_pending,
            subject_confirmed=t.subject_confirmed,
            template_confirmed=t.template_confirmed,
            subject_canceled=t.subject_canceled,
            template_canceled=t.template_canceled,
        ),
        smtp=SmtpSettingsRead(
            host=config.smtp.host,
            port=config.smtp.port,
            user=config.smtp.user,
            has_password=bool(config.smtp.password),
        ),
    )


@router.get("", response_model=VenueSettingsRead)
def get_venue_settings(db: Session = Depends(get_db)):
    return _to_read(load_venue_config(db))


@router.put("", response_model=VenueSettingsRead)
def update_venue_settings(data: VenueSettingsUpdate, db: Session = Depends(get_db)):
    current = load_venue_config(db)
    password = data.smtp.password if data.smtp.password is not None else current.smtp.password

    config = VenueConfig(
        restaurant_name=data.restaurant_name,
        address=data.address,
        admin_email=data.admin_email,
        slot_interval_minutes=data.slot_interval_minutes,
        slot_capacity=data.slot_capacity,
        templates=EmailTemplates(**data.templates.model_dump()),
        smtp=SmtpConfig(
            host=data.smtp.host.strip(),
            port=data.smtp.port,
            user=data.smtp.user.strip(),
            password=password.strip(),
        ),
    )
    return _to_read(save_venue_config(db, config))


@router.post("/test-email")
def send_venue_test_email(db: Session = Depends(get_db), smtp_factory=Depends(get_smtp_factory)):
    result = send_test_email(load_venue_config(db), smtp_factory=smtp_factory)
    if not result["success"]:
        raise to_mail_http_error(result)
    return {"success": True, "recipient": result["recipient"]}
