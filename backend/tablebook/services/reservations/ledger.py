# backend/tablebook/services/reservations/ledger.py
"""
Reservation ledger: creation and status transitions.

States:
  PENDING  → CONFIRMED | CANCELED
  CONFIRMED → CANCELED
  CANCELED: final

Capacity guard:
  slot_occupancy holds the active (non-canceled) count per (date, time_slot).
  create() claims a seat with a conditional UPDATE

      UPDATE slot_occupancy SET active = active + 1
      WHERE date = :d AND time_slot = :t AND active < :capacity

  and inserts the reservation in the same transaction. The database
  serialises writers on that row, so two requests can never both take the
  last seat, whichever process they run in. Cancelling releases the seat in
  the status-change transaction.

Notifications are emitted after commit and never roll anything back.
"""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import venue_now
from ...models import Reservations, SlotOccupancy
from ..events import emit_event
from ..schedule import ScheduleResolver, ScheduleStore, format_time
from ..slots import Slot, generate_day_slots
from ..slots.availability import is_past_slot
from ..venue_settings import VenueConfig, load_venue_config
from .errors import (
    CapacityExceededError,
    InvalidTransitionError,
    NotFoundError,
    StorageUnavailable,
    ValidationError,
)
from .validation import ReservationRequest, ValidRequest, validate_request

logger = logging.getLogger(__name__)

Notifier = Callable[[str, dict], None]

EVENT_CREATED = "reservation_created"
EVENT_STATUS_CHANGED = "reservation_status_changed"


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"


# Targets reachable from each state (same-status updates are handled as no-ops)
ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELED}),
    ReservationStatus.CANCELED: frozenset(),
}


def _now_str() -> str:
    return datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")


def _insert_occupancy_row(dialect_name: str, date_str: str, time_str: str):
    """
    INSERT ... ON CONFLICT DO NOTHING for the slot counter.

    A new counter starts from the rows already present, so reservations
    written before the counter existed are still counted.
    """
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert

    existing = (
        select(func.count(Reservations.id))
        .where(
            Reservations.date == date_str,
            Reservations.time_slot == time_str,
            Reservations.status != ReservationStatus.CANCELED.value,
        )
        .scalar_subquery()
    )
    return (
        insert(SlotOccupancy)
        .values(date=date_str, time_slot=time_str, active=existing)
        .on_conflict_do_nothing(index_elements=["date", "time_slot"])
    )


class ReservationLedger:
    def __init__(
        self,
        db: Session,
        venue: Optional[VenueConfig] = None,
        notify: Notifier = emit_event,
    ):
        self.db = db
        self._venue = venue
        self.notify = notify

    @property
    def venue(self) -> VenueConfig:
        if self._venue is None:
            self._venue = load_venue_config(self.db)
        return self._venue

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, reservation_id: str) -> Reservations:
        reservation = self.db.get(Reservations, reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    def list_reservations(
        self,
        status: Optional[str] = None,
        target_date: Optional[str] = None,
    ) -> list[Reservations]:
        """Filter by status and/or date. A date sorts by time slot, otherwise newest first."""
        query = self.db.query(Reservations)
        if status:
            query = query.filter(Reservations.status == status)
        if target_date:
            query = query.filter(Reservations.date == target_date)
            query = query.order_by(Reservations.time_slot.asc(), Reservations.created_at.asc())
        else:
            query = query.order_by(Reservations.created_at.desc())
        return query.all()

    # ── Create ───────────────────────────────────────────────────────────

    def create(
        self,
        request: ReservationRequest,
        now: Optional[datetime] = None,
    ) -> Reservations:
        """
        Create a PENDING reservation.

        Raises:
            ValidationError: malformed request, slot not offered that day, or past slot
            CapacityExceededError: slot already full
            StorageUnavailable: storage failed, nothing written
        """
        valid = validate_request(request)
        now = now or venue_now()

        try:
            existing = self._find_by_idempotency_key(valid.request.idempotency_key)
            if existing is not None:
                logger.info(
                    f"Duplicate submission for key={valid.request.idempotency_key}, "
                    f"returning reservation {existing.id}"
                )
                return existing

            self._check_slot_offered(valid, now)
            reservation = self._insert_with_capacity_claim(valid)
        except IntegrityError:
            self.db.rollback()
            # A concurrent request with the same key won the race
            existing = self._find_by_idempotency_key(valid.request.idempotency_key)
            if existing is not None:
                return existing
            logger.exception("Reservation insert violated a constraint")
            raise StorageUnavailable("Reservation could not be stored")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Storage failure while creating reservation for {valid.request.date}")
            raise StorageUnavailable("Reservation could not be stored")

        logger.info(
            f"Reservation created: id={reservation.id}, date={reservation.date}, "
            f"time={reservation.time_slot}, shift={reservation.shift}, "
            f"guests={reservation.guests}"
        )

        self._notify(EVENT_CREATED, {
            "reservation_id": reservation.id,
            "status": ReservationStatus.PENDING.value,
        })
        return reservation

    def _find_by_idempotency_key(self, key: Optional[str]) -> Optional[Reservations]:
        if not key:
            return None
        return (
            self.db.query(Reservations)
            .filter(Reservations.idempotency_key == key)
            .first()
        )

    def _check_slot_offered(self, valid: ValidRequest, now: datetime) -> None:
        """The slot must be generated by today's schedule for that date and not be past."""
        schedule = ScheduleResolver(ScheduleStore(self.db)).resolve(valid.date)
        if schedule.closed:
            logger.warning(f"Rejected reservation on closed day {valid.request.date}")
            raise ValidationError(f"The venue is closed on {valid.request.date}", reason="day_closed")

        offered = generate_day_slots(schedule, self.venue.slot_interval_minutes)
        if Slot(valid.time_slot, valid.shift) not in offered:
            logger.warning(
                f"Rejected reservation for unavailable slot "
                f"{valid.request.date} {valid.request.time_slot} {valid.shift.value}"
            )
            raise ValidationError(
                f"{valid.request.time_slot} is not a {valid.shift.value} slot on {valid.request.date}",
                reason="slot_not_offered",
            )

        if is_past_slot(valid.date, Slot(valid.time_slot, valid.shift), now):
            raise ValidationError(
                f"{valid.request.date} {valid.request.time_slot} is in the past",
                reason="slot_in_past",
            )

    def _insert_with_capacity_claim(self, valid: ValidRequest) -> Reservations:
        req = valid.request
        time_str = format_time(valid.time_slot)
        dialect_name = self.db.get_bind().dialect.name

        # First statement of the transaction is a write: the slot row is
        # locked from here until commit or rollback.
        self.db.execute(_insert_occupancy_row(dialect_name, req.date, time_str))

        claimed = self.db.execute(
            update(SlotOccupancy)
            .where(
                and_(
                    SlotOccupancy.date == req.date,
                    SlotOccupancy.time_slot == time_str,
                    SlotOccupancy.active < self.venue.slot_capacity,
                )
            )
            .values(active=SlotOccupancy.active + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            self.db.rollback()
            logger.warning(f"Slot full: {req.date} {time_str} (capacity {self.venue.slot_capacity})")
            raise CapacityExceededError(f"{req.date} {time_str} is no longer available")

        created_at = _now_str()
        reservation = Reservations(
            id=str(uuid.uuid4()),
            date=req.date,
            time_slot=time_str,
            shift=valid.shift.value,
            guests=req.guests,
            first_name=req.first_name,
            last_name=req.last_name,
            email=req.email,
            phone=req.phone,
            allergies=req.allergies,
            notes=req.notes,
            status=ReservationStatus.PENDING.value,
            idempotency_key=req.idempotency_key,
            email_sent=0,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(reservation)
        self.db.commit()
        self.db.refresh(reservation)
        return reservation

    # ── Status ───────────────────────────────────────────────────────────

    def set_status(self, reservation_id: str, new_status: str) -> Reservations:
        """
        Move a reservation to `new_status`.

        Re-setting the current status changes nothing and sends no
        notification.

        Raises:
            NotFoundError, InvalidTransitionError, ValidationError, StorageUnavailable
        """
        try:
            target = ReservationStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown status: {new_status}", reason="invalid_status")

        try:
            reservation = self.get(reservation_id)
            current = ReservationStatus(reservation.status)

            if target == current:
                logger.info(f"Reservation {reservation_id} already {current.value}, nothing to do")
                return reservation

            if target not in ALLOWED_TRANSITIONS[current]:
                raise InvalidTransitionError(
                    f"Cannot change reservation {reservation_id} from {current.value} to {target.value}"
                )

            changed = self.db.execute(
                update(Reservations)
                .where(
                    Reservations.id == reservation_id,
                    Reservations.status == current.value,
                )
                .values(status=target.value, updated_at=_now_str())
                .execution_options(synchronize_session=False)
            )
            if changed.rowcount != 1:
                # Another request changed the status first
                self.db.rollback()
                self.db.refresh(reservation)
                if reservation.status == target.value:
                    return reservation
                raise InvalidTransitionError(
                    f"Reservation {reservation_id} changed concurrently to {reservation.status}"
                )

            if target == ReservationStatus.CANCELED:
                self._release_seat(reservation.date, reservation.time_slot)

            self.db.commit()
            self.db.refresh(reservation)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Storage failure while updating reservation {reservation_id}")
            raise StorageUnavailable("Reservation status could not be stored")

        logger.info(f"Reservation {reservation_id} status: {current.value} → {target.value}")

        self._notify(EVENT_STATUS_CHANGED, {
            "reservation_id": reservation_id,
            "status": target.value,
            "previous_status": current.value,
        })
        return reservation

    def _release_seat(self, date_str: str, time_str: str) -> None:
        self.db.execute(
            update(SlotOccupancy)
            .where(
                SlotOccupancy.date == date_str,
                SlotOccupancy.time_slot == time_str,
                SlotOccupancy.active > 0,
            )
            .values(active=SlotOccupancy.active - 1)
            .execution_options(synchronize_session=False)
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _notify(self, event_type: str, payload: dict) -> None:
        try:
            self.notify(event_type, payload)
        except Exception:
            logger.exception(f"Notification {event_type} failed for {payload.get('reservation_id')}")
