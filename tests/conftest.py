"""Shared fixtures: a file-backed SQLite database per test."""

import smtplib
from datetime import date, datetime

import pytest
from sqlalchemy.orm import sessionmaker

from tablebook.database import build_engine, init_db
from tablebook.models import Reservations
from tablebook.services.reservations import ReservationRequest
from tablebook.services.venue_settings import VenueConfig

# 2099-01-05 is a Monday, 2099-01-04 a Sunday (closed in the default template)
MONDAY = date(2099, 1, 5)
SUNDAY = date(2099, 1, 4)
BEFORE_MONDAY = datetime(2099, 1, 1, 12, 0)


class FakeSmtp:
    """SMTP client double; sending to an address in `fail_for` is refused."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)
        self.closed = False

    def send_message(self, msg):
        if msg["To"] in self.fail_for:
            raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"no such user")})
        self.sent.append(msg)

    def quit(self):
        self.closed = True


class RecordingNotifier:
    """Collects emitted (event_type, payload) pairs."""

    def __init__(self):
        self.events = []

    def __call__(self, event_type, payload):
        self.events.append((event_type, payload))


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def venue():
    return VenueConfig(slot_interval_minutes=30, slot_capacity=10)


def make_request(**overrides) -> ReservationRequest:
    data = {
        "date": MONDAY.isoformat(),
        "time_slot": "20:00",
        "shift": "DINNER",
        "guests": 2,
        "first_name": "Ana",
        "last_name": "García",
        "email": "ana@example.com",
    }
    data.update(overrides)
    return ReservationRequest(**data)


def add_reservation(db, status="PENDING", target_date=MONDAY, time_slot="20:00", **fields):
    """Insert a reservation row directly, bypassing the ledger."""
    import uuid

    row = Reservations(
        id=str(uuid.uuid4()),
        date=target_date.isoformat(),
        time_slot=time_slot,
        shift=fields.pop("shift", "DINNER"),
        guests=fields.pop("guests", 2),
        first_name=fields.pop("first_name", "Luis"),
        last_name=fields.pop("last_name", "Pérez"),
        email=fields.pop("email", "luis@example.com"),
        status=status,
        email_sent=0,
        created_at="2099-01-01 10:00:00",
        updated_at="2099-01-01 10:00:00",
        **fields,
    )
    db.add(row)
    db.commit()
    return row
