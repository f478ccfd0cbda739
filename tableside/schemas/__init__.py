"""Pydantic schemas for API requests and responses"""

from tableside.schemas.reservation import (
    SpecialRequests,
    BookingRequest,
    BookingResponse,
    AvailabilityRequest,
    AvailabilitySettings,
    AvailabilityResponse,
)

__all__ = [
    "SpecialRequests",
    "BookingRequest",
    "BookingResponse",
    "AvailabilityRequest",
    "AvailabilitySettings",
    "AvailabilityResponse",
]
