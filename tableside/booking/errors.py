"""Booking rejections, each mapped to a distinct reason and HTTP status"""


class BookingError(Exception):
    """Base class for all booking outcomes other than success"""
    status_code = 500
    reason = "internal_error"
    default_message = "Failed to create reservation"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"reason": self.reason, "message": self.message}


class LocationNotFound(BookingError):
    status_code = 404
    reason = "location_not_found"
    default_message = "Location not found"


class BookingDisabled(BookingError):
    status_code = 400
    reason = "booking_disabled"
    default_message = "Online reservations are not enabled for this location"


class PartyTooLarge(BookingError):
    status_code = 400
    reason = "party_too_large"

    def __init__(self, max_party_size: int):
        self.max_party_size = max_party_size
        super().__init__(f"For parties of {max_party_size + 1}+, please call to reserve")


class InvalidBookingDate(BookingError):
    status_code = 400
    reason = "invalid_date"
    default_message = "Reservations cannot be made for this date"


class SlotUnavailable(BookingError):
    status_code = 409
    reason = "slot_unavailable"
    default_message = "This time slot is no longer available. Please select another time."


class NoSuitableTable(BookingError):
    status_code = 400
    reason = "no_suitable_table"
    default_message = "No suitable tables available"


class NoTableAvailable(BookingError):
    status_code = 409
    reason = "no_table_available"
    default_message = "No tables available for this time slot"


class BookingFailed(BookingError):
    """Storage failure; the message never carries internal detail"""
