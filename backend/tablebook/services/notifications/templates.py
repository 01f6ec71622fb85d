# backend/tablebook/services/notifications/templates.py
"""
Email subject/body rendering.

Tokens look like %firstName%. Replacement is literal and case-sensitive;
tokens without a value are left in the text unchanged.
"""

from datetime import date

from ...models import Reservations
from ..venue_settings import VenueConfig

MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)

DEFAULT_SUBJECTS = {
    "PENDING": "Reserva Recibida",
    "CONFIRMED": "Reserva Confirmada",
    "CANCELED": "Reserva Cancelada",
}

DEFAULT_BODIES = {
    "PENDING": "Hemos recibido tu reserva para %guests% personas el %date% a las %time%.",
    "CONFIRMED": "Tu reserva para el %date% a las %time% está confirmada.",
    "CANCELED": "Tu reserva para el %date% a las %time% ha sido cancelada.",
}


def short_reference(reservation_id: str) -> str:
    """First block of the uuid, upper-cased: what guests quote on the phone."""
    return reservation_id.split("-")[0].upper()


def build_template_vars(reservation: Reservations, venue: VenueConfig) -> dict[str, str]:
    day = date.fromisoformat(reservation.date)
    return {
        "%firstName%": reservation.first_name,
        "%lastName%": reservation.last_name,
        "%email%": reservation.email,
        "%guests%": str(reservation.guests),
        "%date%": f"{day.day}/{day.month}/{day.year}",
        "%dateDay%": str(day.day),
        "%dateMonth%": MONTH_NAMES[day.month - 1],
        "%dateYear%": str(day.year),
        "%time%": reservation.time_slot,
        "%shift%": reservation.shift,
        "%status%": reservation.status,
        "%restaurantName%": venue.restaurant_name or "Restaurante",
        "%id%": short_reference(reservation.id),
        "%address%": venue.address,
        "%allergies%": reservation.allergies or "Ninguna",
        "%notes%": reservation.notes or "Ninguna",
        "%phone%": reservation.phone or "",
    }


def render_template(text: str, variables: dict[str, str]) -> str:
    for token, value in variables.items():
        text = text.replace(token, value)
    return text


def pick_template(venue: VenueConfig, status: str) -> tuple[str, str]:
    """(subject, body) configured for a status, falling back to the defaults."""
    templates = venue.templates
    configured = {
        "PENDING": (templates.subject_pending, templates.template_pending),
        "CONFIRMED": (templates.subject_confirmed, templates.template_confirmed),
        "CANCELED": (templates.subject_canceled, templates.template_canceled),
    }
    key = status if status in configured else "CONFIRMED"
    subject, body = configured[key]
    return subject or DEFAULT_SUBJECTS[key], body or DEFAULT_BODIES[key]
