"""Database models"""

from tableside.models.location import Location, ReservationSettings, OperatingHours, BlackoutDate
from tableside.models.seating import ActiveState, SeatingMap, SeatingTable
from tableside.models.reservation import (
    Reservation,
    ReservationTable,
    ReservationStatus,
    ReservationSource,
    TERMINAL_STATUSES,
)
from tableside.models.customer import Customer

__all__ = [
    "Location",
    "ReservationSettings",
    "OperatingHours",
    "BlackoutDate",
    "ActiveState",
    "SeatingMap",
    "SeatingTable",
    "Reservation",
    "ReservationTable",
    "ReservationStatus",
    "ReservationSource",
    "TERMINAL_STATUSES",
    "Customer",
]
