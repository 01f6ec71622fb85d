# backend/tablebook/services/notifications/mailer.py
"""
Reservation emails over SMTP.

Best effort: every failure is logged and reported in the result dict, the
reservation itself is never touched except for the email_sent flag.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable

from sqlalchemy.orm import Session

from ...config import settings
from ...models import Reservations
from ..venue_settings import SmtpConfig, VenueConfig, load_venue_config
from .ics import build_ics
from .templates import build_template_vars, pick_template, render_template

logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 20  # seconds

SmtpFactory = Callable[[SmtpConfig], smtplib.SMTP]


def open_smtp(smtp: SmtpConfig) -> smtplib.SMTP:
    """Port 465 uses implicit TLS, anything else STARTTLS."""
    if smtp.port == 465:
        client = smtplib.SMTP_SSL(
            smtp.host, smtp.port, timeout=SMTP_TIMEOUT, context=ssl.create_default_context()
        )
    else:
        client = smtplib.SMTP(smtp.host, smtp.port, timeout=SMTP_TIMEOUT)
        client.starttls(context=ssl.create_default_context())
    client.login(smtp.user, smtp.password)
    return client


def build_guest_message(reservation: Reservations, venue: VenueConfig, status: str) -> EmailMessage:
    variables = build_template_vars(reservation, venue)
    subject, body = pick_template(venue, status)
    text = render_template(body, variables)

    msg = EmailMessage()
    msg["Subject"] = render_template(subject, variables)
    msg["From"] = f'"{venue.restaurant_name or "Reservas"}" <{venue.smtp.user}>'
    msg["To"] = reservation.email
    msg.set_content(text)
    msg.add_alternative(text.replace("\n", "<br>"), subtype="html")
    msg.add_attachment(
        build_ics(reservation, venue, settings.venue_timezone).encode("utf-8"),
        maintype="text",
        subtype="calendar",
        filename="invite.ics",
        params={"method": "REQUEST"},
    )
    return msg


def build_admin_message(reservation: Reservations, venue: VenueConfig) -> EmailMessage:
    text = (
        f"Nueva reserva de {reservation.first_name} {reservation.last_name} "
        f"para el {reservation.date} a las {reservation.time_slot} "
        f"({reservation.guests} pax)."
    )
    msg = EmailMessage()
    msg["Subject"] = f"Nueva Reserva: {reservation.first_name} ({reservation.guests} pax)"
    msg["From"] = f'"{venue.restaurant_name or "Reservas"}" <{venue.smtp.user}>'
    msg["To"] = venue.admin_email
    msg.set_content(text)
    return msg


def send_reservation_email(
    db: Session,
    reservation_id: str,
    status: str,
    smtp_factory: SmtpFactory = open_smtp,
) -> dict:
    """
    Send the guest email for `status`, plus the admin notice for new reservations.

    Returns:
        {"success": bool, "reason": str | None}
    """
    reservation = db.get(Reservations, reservation_id)
    if reservation is None:
        logger.error(f"[Email] Reservation not found: {reservation_id}")
        return {"success": False, "reason": "reservation_not_found"}

    venue = load_venue_config(db)
    if not venue.smtp.is_complete:
        logger.error("[Email] SMTP settings incomplete, skipping")
        return {"success": False, "reason": "smtp_not_configured"}

    try:
        client = smtp_factory(venue.smtp)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] SMTP connection failed: {e}")
        return {"success": False, "reason": "smtp_connection_failed"}

    guest_sent = False
    try:
        try:
            client.send_message(build_guest_message(reservation, venue, status))
            guest_sent = True
            logger.info(f"[Email] Guest email sent to {reservation.email} ({status})")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[Email] Failed to send to guest {reservation.email}: {e}")

        if status == "PENDING" and venue.admin_email:
            try:
                client.send_message(build_admin_message(reservation, venue))
                logger.info(f"[Email] Admin notification sent to {venue.admin_email}")
            except (smtplib.SMTPException, OSError) as e:
                logger.error(f"[Email] Failed to send admin notification: {e}")
    finally:
        try:
            client.quit()
        except (smtplib.SMTPException, OSError):
            pass

    if not guest_sent:
        return {"success": False, "reason": "send_failed"}

    reservation.email_sent = 1
    db.commit()
    return {"success": True, "reason": None}


def send_test_email(venue: VenueConfig, smtp_factory: SmtpFactory = open_smtp) -> dict:
    """
    Connect with the venue's SMTP settings and send a short test message.

    Goes to the admin address, or to the SMTP user when none is set.

    Returns:
        {"success": bool, "reason": str | None, "recipient": str | None}
    """
    if not venue.smtp.is_complete:
        return {"success": False, "reason": "smtp_not_configured", "recipient": None}

    recipient = venue.admin_email or venue.smtp.user
    try:
        client = smtp_factory(venue.smtp)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] Test connection to {venue.smtp.host}:{venue.smtp.port} failed: {e}")
        return {"success": False, "reason": "smtp_connection_failed", "recipient": recipient}

    msg = EmailMessage()
    msg["Subject"] = "Correo de prueba"
    msg["From"] = f'"{venue.restaurant_name or "Reservas"}" <{venue.smtp.user}>'
    msg["To"] = recipient
    msg.set_content("Si recibes este correo, la configuración SMTP funciona.")

    try:
        client.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] Test email to {recipient} failed: {e}")
        return {"success": False, "reason": "send_failed", "recipient": recipient}
    finally:
        try:
            client.quit()
        except (smtplib.SMTPException, OSError):
            pass

    logger.info(f"[Email] Test email sent to {recipient}")
    return {"success": True, "reason": None, "recipient": recipient}
