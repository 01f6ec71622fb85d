"""
Calendar invite attached to reservation emails.

Times are written in UTC (trailing Z), so no VTIMEZONE block is needed.
Text values are escaped and long lines folded as RFC 5545 requires.
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from ...models import Reservations
from ..venue_settings import VenueConfig

EVENT_DURATION = timedelta(minutes=90)
REMINDER_MINUTES = 60
MAX_LINE_OCTETS = 75


def escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """Split a content line into chunks of at most 75 octets, never inside a character."""
    chunks = []
    current = ""
    limit = MAX_LINE_OCTETS
    for char in line:
        if len((current + char).encode("utf-8")) > limit:
            chunks.append(current)
            current = ""
            # Continuation lines start with a space that counts towards the limit
            limit = MAX_LINE_OCTETS - 1
        current += char
    chunks.append(current)
    return "\r\n ".join(chunks)


def _format_utc(dt: datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%SZ")


def build_ics(
    reservation: Reservations,
    venue: VenueConfig,
    timezone: str,
    stamp: datetime | None = None,
) -> str:
    local_start = datetime.fromisoformat(f"{reservation.date}T{reservation.time_slot}")
    start = local_start.replace(tzinfo=ZoneInfo(timezone)).astimezone(dt_timezone.utc)
    end = start + EVENT_DURATION
    stamp = stamp or datetime.utcnow()
    name = venue.restaurant_name or "Restaurante"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//tablebook//reservations//EN",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{reservation.id}@tablebook",
        f"DTSTAMP:{_format_utc(stamp)}",
        f"DTSTART:{_format_utc(start)}",
        f"DTEND:{_format_utc(end)}",
        f"SUMMARY:{escape_text(f'Reserva en {name}')}",
        f"DESCRIPTION:{escape_text(f'Reserva para {reservation.guests} personas. Código: {reservation.id}')}",
        f"LOCATION:{escape_text(venue.address)}",
        "BEGIN:VALARM",
        f"TRIGGER:-PT{REMINDER_MINUTES}M",
        "ACTION:DISPLAY",
        "DESCRIPTION:Recordatorio de reserva en 1 hora",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(fold_line(line) for line in lines) + "\r\n"
