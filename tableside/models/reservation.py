"""Reservation models"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Integer, DateTime, Date, Time, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from tableside.database import Base


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SEATED = "seated"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Reservations in these states no longer hold their table
TERMINAL_STATUSES = frozenset({
    ReservationStatus.CANCELLED.value,
    ReservationStatus.NO_SHOW.value,
    ReservationStatus.COMPLETED.value,
})


class ReservationSource(str, enum.Enum):
    ONLINE = "online"
    STAFF = "staff"


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)

    # Customer information
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(32), nullable=False)
    customer_email = Column(String(255))
    wants_loyalty_enrollment = Column(Boolean, default=False)

    # Reservation details
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    party_size = Column(Integer, nullable=False)

    # {"allergies": "", "notes": "", "occasion": "", "wheelchair": false, "high_chair": false}
    special_accommodations = Column(JSON, default=dict)

    # Status
    status = Column(String(50), default=ReservationStatus.CONFIRMED.value)
    source = Column(String(20), default=ReservationSource.ONLINE.value)
    confirmation_code = Column(String(32), unique=True, nullable=False)

    # Employee who entered the booking; NULL for online bookings
    created_by = Column(Uuid)

    # Email confirmation
    confirmation_sent_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    location = relationship("Location", back_populates="reservations")
    table_assignment = relationship("ReservationTable", back_populates="reservation", uselist=False)


class ReservationTable(Base):
    """Assignment of a reservation to a physical table"""
    __tablename__ = "reservation_tables"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id = Column(Uuid, ForeignKey("reservations.id", ondelete="CASCADE"), unique=True, nullable=False)
    table_id = Column(Uuid, ForeignKey("seating_tables.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    reservation = relationship("Reservation", back_populates="table_assignment")
    table = relationship("SeatingTable", back_populates="assignments")
