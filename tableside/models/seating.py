"""Seating map and table models"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from tableside.database import Base


class ActiveState(str, enum.Enum):
    """Three-valued reading of a nullable is_active column"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNSPECIFIED = "unspecified"

    @classmethod
    def from_flag(cls, flag) -> "ActiveState":
        if flag is None:
            return cls.UNSPECIFIED
        return cls.ACTIVE if flag else cls.INACTIVE

    @property
    def is_effective(self) -> bool:
        """Only an explicit False takes a table out of service"""
        return self is not ActiveState.INACTIVE


class SeatingMap(Base):
    """Floor plan grouping the tables of a location"""
    __tablename__ = "seating_maps"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    location = relationship("Location", back_populates="seating_maps")
    tables = relationship("SeatingTable", back_populates="seating_map")

    @property
    def active_state(self) -> ActiveState:
        return ActiveState.from_flag(self.is_active)


class SeatingTable(Base):
    """Physical table that a reservation can be assigned to"""
    __tablename__ = "seating_tables"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    seating_map_id = Column(Uuid, ForeignKey("seating_maps.id"), nullable=False)
    label = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    seating_map = relationship("SeatingMap", back_populates="tables")
    assignments = relationship("ReservationTable", back_populates="table")

    @property
    def active_state(self) -> ActiveState:
        return ActiveState.from_flag(self.is_active)
