"""Table allocation and booking commit"""

from tableside.booking.coordinator import BookingCoordinator, BookingDraft
from tableside.booking.codes import ConfirmationCodeIssuer
from tableside.booking.availability import SlotAvailabilityOracle, OperatingHoursOracle
from tableside.booking.service import book_reservation, check_availability

__all__ = [
    "BookingCoordinator",
    "BookingDraft",
    "ConfirmationCodeIssuer",
    "SlotAvailabilityOracle",
    "OperatingHoursOracle",
    "book_reservation",
    "check_availability",
]
