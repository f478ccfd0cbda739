"""Public reservation schemas"""

from datetime import date, time
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class SpecialRequests(BaseModel):
    """Guest accommodations captured with an online booking"""
    allergies: str = ""
    notes: str = ""
    occasion: str = ""
    wheelchair: bool = False
    high_chair: bool = False


class BookingRequest(BaseModel):
    """Online booking request"""
    model_config = ConfigDict(str_strip_whitespace=True)

    location_id: UUID
    date: date
    time: time
    party_size: int = Field(ge=1)
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=32)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    special_requests: Optional[SpecialRequests] = None
    wants_loyalty_enrollment: bool = False


class BookingResponse(BaseModel):
    """Confirmed booking"""
    reservation_id: UUID
    confirmation_code: str
    table_label: str
    date: date
    time: str
    party_size: int
    duration: int
    message: str


class AvailabilityRequest(BaseModel):
    """Slot lookup for a date and party size"""
    location_id: UUID
    date: date
    party_size: int = Field(ge=1)


class AvailabilitySettings(BaseModel):
    """Booking rules shown alongside the slots"""
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    max_party_size_online: int
    default_duration_minutes: int
    time_slot_interval: int
    min_advance_hours: Optional[int] = None
    max_advance_days: Optional[int] = None


class AvailabilityResponse(BaseModel):
    """Bookable times as HH:MM strings"""
    available_slots: List[str] = []
    settings: AvailabilitySettings
    message: Optional[str] = None
    requires_call: bool = False
    is_closed: bool = False
