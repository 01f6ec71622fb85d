"""Tests for reservation emails and the notification consumer."""

import asyncio
import json
import smtplib
from datetime import datetime

import pytest

from tablebook.models import Reservations
from tablebook.services.notifications import consumer
from tablebook.services.notifications.ics import build_ics, escape_text, fold_line
from tablebook.services.notifications.mailer import send_reservation_email, send_test_email
from tablebook.services.notifications.templates import (
    build_template_vars,
    pick_template,
    render_template,
)
from tablebook.services.venue_settings import (
    EmailTemplates,
    SmtpConfig,
    VenueConfig,
    save_venue_config,
)

from tests.conftest import FakeSmtp, add_reservation

RESERVATION_ID = "9f1c2d3e-0000-4000-8000-000000000001"

SMTP = SmtpConfig(host="smtp.example.com", port=587, user="reservas@example.com", password="secret")


def make_reservation(**fields):
    data = {
        "id": RESERVATION_ID,
        "date": "2099-03-07",
        "time_slot": "21:30",
        "shift": "DINNER",
        "guests": 4,
        "first_name": "Ana",
        "last_name": "García",
        "email": "ana@example.com",
        "status": "PENDING",
    }
    data.update(fields)
    return Reservations(**data)


class TestTemplates:
    """Token rendering."""

    def test_template_vars(self):
        venue = VenueConfig(restaurant_name="Casa Lola", address="Calle Mayor 1")

        variables = build_template_vars(make_reservation(allergies="Gluten"), venue)

        assert variables["%date%"] == "7/3/2099"
        assert variables["%dateMonth%"] == "marzo"
        assert variables["%time%"] == "21:30"
        assert variables["%id%"] == "9F1C2D3E"
        assert variables["%allergies%"] == "Gluten"
        assert variables["%notes%"] == "Ninguna"
        assert variables["%restaurantName%"] == "Casa Lola"

    def test_render_replaces_every_occurrence(self):
        text = render_template(
            "Hola %firstName%, %firstName%! %unknown%",
            {"%firstName%": "Ana"},
        )

        assert text == "Hola Ana, Ana! %unknown%"

    def test_pick_template_falls_back_to_defaults(self):
        venue = VenueConfig(templates=EmailTemplates(subject_confirmed="Confirmada en %restaurantName%"))

        subject, body = pick_template(venue, "CONFIRMED")
        pending_subject, _ = pick_template(venue, "PENDING")

        assert subject == "Confirmada en %restaurantName%"
        assert "%date%" in body
        assert pending_subject == "Reserva Recibida"


class TestIcs:
    """Calendar invite content."""

    def test_invite_times_are_utc(self):
        venue = VenueConfig(restaurant_name="Casa Lola", address="Calle Mayor 1")

        ics = build_ics(make_reservation(), venue, "Europe/Madrid", stamp=datetime(2099, 1, 1, 10, 0))

        lines = ics.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        # 21:30 in Madrid in March (UTC+1)
        assert "DTSTART:20990307T203000Z" in lines
        assert "DTEND:20990307T220000Z" in lines
        assert "DTSTAMP:20990101T100000Z" in lines
        assert f"UID:{RESERVATION_ID}@tablebook" in lines
        assert "TRIGGER:-PT60M" in lines
        assert "LOCATION:Calle Mayor 1" in lines
        assert not any("TZID" in line for line in lines)

    def test_summer_time_offset(self):
        ics = build_ics(make_reservation(date="2099-07-07"), VenueConfig(), "Europe/Madrid")

        assert "DTSTART:20990707T193000Z" in ics.split("\r\n")

    def test_text_values_are_escaped(self):
        venue = VenueConfig(restaurant_name="Lola; Bar", address="Calle Mayor, 1\nMadrid")

        lines = build_ics(make_reservation(), venue, "Europe/Madrid").split("\r\n")

        assert "LOCATION:Calle Mayor\\, 1\\nMadrid" in lines
        assert "SUMMARY:Reserva en Lola\\; Bar" in lines

    def test_escape_backslash_first(self):
        assert escape_text("a\\b,c") == "a\\\\b\\,c"

    def test_long_lines_are_folded(self):
        venue = VenueConfig(address="Avenida " + "ñ" * 120)

        ics = build_ics(make_reservation(), venue, "Europe/Madrid")

        physical = ics.split("\r\n")
        assert all(len(line.encode("utf-8")) <= 75 for line in physical)
        unfolded = ics.replace("\r\n ", "")
        assert f"LOCATION:Avenida {'ñ' * 120}" in unfolded.split("\r\n")

    def test_short_line_is_not_folded(self):
        assert fold_line("SUMMARY:Reserva") == "SUMMARY:Reserva"


class TestSendReservationEmail:
    """Mailer behaviour against a fake SMTP client."""

    def test_sends_guest_and_admin_email_for_new_reservation(self, db):
        save_venue_config(db, VenueConfig(
            restaurant_name="Casa Lola", admin_email="staff@example.com", smtp=SMTP,
        ))
        reservation = add_reservation(db)
        client = FakeSmtp()

        result = send_reservation_email(db, reservation.id, "PENDING", smtp_factory=lambda smtp: client)

        assert result == {"success": True, "reason": None}
        assert [m["To"] for m in client.sent] == ["luis@example.com", "staff@example.com"]
        guest = client.sent[0]
        assert guest["Subject"] == "Reserva Recibida"
        attachments = [part.get_filename() for part in guest.iter_attachments()]
        assert attachments == ["invite.ics"]
        assert client.closed
        db.expire_all()
        assert db.get(Reservations, reservation.id).email_sent == 1

    def test_status_change_skips_admin(self, db):
        save_venue_config(db, VenueConfig(admin_email="staff@example.com", smtp=SMTP))
        reservation = add_reservation(db, status="CONFIRMED")
        client = FakeSmtp()

        send_reservation_email(db, reservation.id, "CONFIRMED", smtp_factory=lambda smtp: client)

        assert [m["To"] for m in client.sent] == ["luis@example.com"]
        assert client.sent[0]["Subject"] == "Reserva Confirmada"

    def test_missing_reservation(self, db):
        result = send_reservation_email(db, "missing", "PENDING", smtp_factory=lambda smtp: FakeSmtp())

        assert result == {"success": False, "reason": "reservation_not_found"}

    def test_incomplete_smtp_settings(self, db):
        reservation = add_reservation(db)

        result = send_reservation_email(db, reservation.id, "PENDING", smtp_factory=lambda smtp: FakeSmtp())

        assert result["reason"] == "smtp_not_configured"

    def test_connection_failure(self, db):
        save_venue_config(db, VenueConfig(smtp=SMTP))
        reservation = add_reservation(db)

        def refuse(smtp):
            raise ConnectionRefusedError("smtp down")

        result = send_reservation_email(db, reservation.id, "PENDING", smtp_factory=refuse)

        assert result == {"success": False, "reason": "smtp_connection_failed"}

    def test_send_failure_leaves_flag_unset(self, db):
        save_venue_config(db, VenueConfig(smtp=SMTP))
        reservation = add_reservation(db)
        client = FakeSmtp(fail_for={"luis@example.com"})

        result = send_reservation_email(db, reservation.id, "PENDING", smtp_factory=lambda smtp: client)

        assert result["reason"] == "send_failed"
        assert client.closed
        db.expire_all()
        assert db.get(Reservations, reservation.id).email_sent == 0

    def test_admin_notified_when_guest_send_fails(self, db):
        save_venue_config(db, VenueConfig(admin_email="staff@example.com", smtp=SMTP))
        reservation = add_reservation(db)
        client = FakeSmtp(fail_for={"luis@example.com"})

        result = send_reservation_email(db, reservation.id, "PENDING", smtp_factory=lambda smtp: client)

        assert result["reason"] == "send_failed"
        assert [m["To"] for m in client.sent] == ["staff@example.com"]


class TestSendTestEmail:
    """SMTP check for staff."""

    def test_sends_to_admin(self):
        client = FakeSmtp()
        venue = VenueConfig(admin_email="staff@example.com", smtp=SMTP)

        result = send_test_email(venue, smtp_factory=lambda smtp: client)

        assert result == {"success": True, "reason": None, "recipient": "staff@example.com"}
        assert [m["To"] for m in client.sent] == ["staff@example.com"]
        assert client.closed

    def test_falls_back_to_smtp_user(self):
        client = FakeSmtp()

        result = send_test_email(VenueConfig(smtp=SMTP), smtp_factory=lambda smtp: client)

        assert result["recipient"] == "reservas@example.com"
        assert [m["To"] for m in client.sent] == ["reservas@example.com"]

    def test_connection_failure(self):
        def refuse(smtp):
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

        result = send_test_email(VenueConfig(smtp=SMTP), smtp_factory=refuse)

        assert result["reason"] == "smtp_connection_failed"

    def test_send_failure(self):
        client = FakeSmtp(fail_for={"reservas@example.com"})

        result = send_test_email(VenueConfig(smtp=SMTP), smtp_factory=lambda smtp: client)

        assert result["reason"] == "send_failed"
        assert client.closed

    def test_incomplete_settings(self):
        result = send_test_email(VenueConfig(), smtp_factory=lambda smtp: FakeSmtp())

        assert result["reason"] == "smtp_not_configured"


class FakeRedis:
    def __init__(self):
        self.queues = {}

    async def rpush(self, queue, value):
        self.queues.setdefault(queue, []).append(value)


class TestConsumer:
    """Retry and dead-letter handling."""

    @pytest.fixture
    def results(self, monkeypatch):
        results = []
        monkeypatch.setattr(consumer, "handle_event", lambda data: results.pop(0))
        return results

    def event(self, **fields):
        data = {"type": "reservation_created", "reservation_id": RESERVATION_ID, "status": "PENDING"}
        data.update(fields)
        return json.dumps(data)

    def test_success_pushes_nothing(self, results):
        r = FakeRedis()
        results.append({"success": True, "reason": None})

        asyncio.run(consumer.process_raw_event(r, self.event()))

        assert r.queues == {}

    def test_failure_goes_to_retry_queue(self, results):
        r = FakeRedis()
        results.append({"success": False, "reason": "send_failed"})

        asyncio.run(consumer.process_raw_event(r, self.event()))

        retried = json.loads(r.queues[consumer.RETRY_QUEUE][0])
        assert retried["_attempt"] == 2

    def test_last_attempt_goes_to_dead_queue(self, results):
        r = FakeRedis()
        results.append({"success": False, "reason": "smtp_connection_failed"})

        asyncio.run(consumer.process_raw_event(r, self.event(_attempt=consumer.MAX_RETRIES)))

        assert consumer.RETRY_QUEUE not in r.queues
        assert len(r.queues[consumer.DEAD_QUEUE]) == 1

    @pytest.mark.parametrize("reason", ["reservation_not_found", "smtp_not_configured"])
    def test_permanent_failures_are_not_retried(self, results, reason):
        r = FakeRedis()
        results.append({"success": False, "reason": reason})

        asyncio.run(consumer.process_raw_event(r, self.event()))

        assert r.queues == {}

    def test_invalid_json_goes_to_dead_queue(self, results):
        r = FakeRedis()

        asyncio.run(consumer.process_raw_event(r, "{not json"))

        assert r.queues == {consumer.DEAD_QUEUE: ["{not json"]}

    def test_unknown_event_type_is_ignored(self, results):
        r = FakeRedis()

        asyncio.run(consumer.process_raw_event(r, self.event(type="something_else")))

        assert r.queues == {}
