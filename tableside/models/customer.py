"""Customer / loyalty profile model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid

from tableside.database import Base


class Customer(Base):
    """Guest profile, unique per location and phone number"""
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("location_id", "phone", name="uq_customers_location_phone"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), default="")
    phone = Column(String(32), nullable=False)  # digits only
    email = Column(String(255))

    # Loyalty
    is_loyalty_member = Column(Boolean, default=False)
    loyalty_points = Column(Integer, default=0)
    total_spent_cents = Column(Integer, default=0)
    total_visits = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
