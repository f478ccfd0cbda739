"""Location-related models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Integer, DateTime, Date, Time, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from tableside.database import Base


class Location(Base):
    """Restaurant location"""
    __tablename__ = "locations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    timezone = Column(String(50), default="America/New_York")
    ordering_enabled = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reservation_settings = relationship("ReservationSettings", back_populates="location", uselist=False)
    operating_hours = relationship("OperatingHours", back_populates="location")
    blackout_dates = relationship("BlackoutDate", back_populates="location")
    seating_maps = relationship("SeatingMap", back_populates="location")
    reservations = relationship("Reservation", back_populates="location")


class ReservationSettings(Base):
    """Online reservation settings, one row per location"""
    __tablename__ = "reservation_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), unique=True, nullable=False)

    online_reservations_enabled = Column(Boolean, default=False)
    max_party_size_online = Column(Integer, default=8)
    default_duration_minutes = Column(Integer, default=120)
    time_slot_interval = Column(Integer, default=15)
    min_advance_hours = Column(Integer, default=1)
    max_advance_days = Column(Integer, default=30)
    confirmation_message = Column(Text, default="Thank you for your reservation!")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    location = relationship("Location", back_populates="reservation_settings")


class OperatingHours(Base):
    """Opening hours for one day of the week (0 = Sunday)"""
    __tablename__ = "operating_hours"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    is_open = Column(Boolean, default=True)
    open_time = Column(Time)
    close_time = Column(Time)

    # Relationships
    location = relationship("Location", back_populates="operating_hours")


class BlackoutDate(Base):
    """Dates on which no online bookings are taken"""
    __tablename__ = "blackout_dates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)
    blackout_date = Column(Date, nullable=False)
    reason = Column(String(255))

    # Relationships
    location = relationship("Location", back_populates="blackout_dates")
