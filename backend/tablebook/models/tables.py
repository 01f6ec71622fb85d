from sqlalchemy import CheckConstraint, Column, Index, Integer, Text, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata


class WeeklySchedule(Base):
    __tablename__ = 'weekly_schedule'
    __table_args__ = (
        CheckConstraint('weekday BETWEEN 0 AND 6'),
    )

    # 0 = Sunday ... 6 = Saturday
    weekday = Column(Integer, primary_key=True, autoincrement=False)
    is_open = Column(Integer, nullable=False, server_default=text('1'))
    lunch_start = Column(Text, nullable=False, server_default=text("'13:00'"))
    lunch_end = Column(Text, nullable=False, server_default=text("'15:30'"))
    dinner_start = Column(Text, nullable=False, server_default=text("'20:00'"))
    dinner_end = Column(Text, nullable=False, server_default=text("'23:00'"))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class SpecialDays(Base):
    __tablename__ = 'special_days'

    id = Column(Integer, primary_key=True)
    date = Column(Text, nullable=False, unique=True)
    is_closed = Column(Integer, nullable=False, server_default=text('0'))
    lunch_closed = Column(Integer, nullable=False, server_default=text('0'))
    dinner_closed = Column(Integer, nullable=False, server_default=text('0'))
    lunch_start = Column(Text)
    lunch_end = Column(Text)
    dinner_start = Column(Text)
    dinner_end = Column(Text)
    note = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class Reservations(Base):
    __tablename__ = 'reservations'
    __table_args__ = (
        Index('ix_reservations_date_time_slot', 'date', 'time_slot'),
        CheckConstraint('guests BETWEEN 1 AND 20'),
    )

    id = Column(Text, primary_key=True)
    date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    shift = Column(Text, nullable=False)
    guests = Column(Integer, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text)
    allergies = Column(Text)
    notes = Column(Text)
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    idempotency_key = Column(Text, unique=True)
    email_sent = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class SlotOccupancy(Base):
    """Active (non-canceled) reservation count per slot, the capacity guard."""
    __tablename__ = 'slot_occupancy'
    __table_args__ = (
        CheckConstraint('active >= 0'),
    )

    date = Column(Text, primary_key=True)
    time_slot = Column(Text, primary_key=True)
    active = Column(Integer, nullable=False, server_default=text('0'))


class VenueSettings(Base):
    __tablename__ = 'venue_settings'

    id = Column(Integer, primary_key=True)
    restaurant_name = Column(Text)
    address = Column(Text)
    admin_email = Column(Text)
    slot_interval_minutes = Column(Integer, nullable=False, server_default=text('30'))
    slot_capacity = Column(Integer, nullable=False, server_default=text('10'))

    email_subject_pending = Column(Text)
    email_template_pending = Column(Text)
    email_subject_confirmed = Column(Text)
    email_template_confirmed = Column(Text)
    email_subject_canceled = Column(Text)
    email_template_canceled = Column(Text)

    smtp_host = Column(Text)
    smtp_port = Column(Integer, nullable=False, server_default=text('587'))
    smtp_user = Column(Text)
    smtp_pass = Column(Text)

    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
