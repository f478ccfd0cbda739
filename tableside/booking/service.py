"""Online booking flow: validate, re-verify, allocate, commit"""

from datetime import date, timedelta
from typing import Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.booking.availability import (
    SlotAvailabilityOracle,
    is_open,
    load_operating_hours,
    location_now,
)
from tableside.booking.coordinator import BookingCoordinator, BookingDraft
from tableside.booking.errors import (
    BookingDisabled,
    BookingError,
    BookingFailed,
    InvalidBookingDate,
    LocationNotFound,
    NoSuitableTable,
    NoTableAvailable,
    PartyTooLarge,
    SlotUnavailable,
)
from tableside.booking.intervals import Interval, normalize_time
from tableside.booking.resolver import find_available_table
from tableside.booking.selector import load_location_tables, select_candidate_tables
from tableside.models.location import Location, ReservationSettings
from tableside.schemas.reservation import (
    AvailabilityResponse,
    AvailabilitySettings,
    BookingRequest,
    BookingResponse,
    SpecialRequests,
)

logger = structlog.get_logger()

DEFAULT_CONFIRMATION_MESSAGE = "Thank you for your reservation!"


async def load_booking_context(
    db: AsyncSession,
    location_id: UUID,
) -> Tuple[Location, ReservationSettings]:
    """Location and its reservation settings, rejecting when online booking is off"""
    location = await db.get(Location, location_id)
    if location is None:
        raise LocationNotFound()

    if not location.ordering_enabled:
        raise BookingDisabled("Online ordering is not enabled for this location")

    result = await db.execute(
        select(ReservationSettings).where(ReservationSettings.location_id == location_id)
    )
    reservation_settings = result.scalar_one_or_none()

    if reservation_settings is None or not reservation_settings.online_reservations_enabled:
        raise BookingDisabled()

    return location, reservation_settings


def slot_matches(slot, requested) -> bool:
    """Requested time must sit exactly on the slot grid, seconds included"""
    return slot.replace(microsecond=0) == requested


async def book_reservation(
    db: AsyncSession,
    request: BookingRequest,
    *,
    oracle: SlotAvailabilityOracle,
    coordinator: BookingCoordinator,
) -> BookingResponse:
    """
    Book a table for an online guest.

    Raises a BookingError subclass for every outcome other than success.
    Nothing is written unless a conflict-free table was found.
    """
    log = logger.bind(
        location_id=str(request.location_id),
        date=request.date.isoformat(),
        party_size=request.party_size,
    )
    log.info("Online booking requested", customer_phone=request.customer_phone)

    try:
        location, reservation_settings = await load_booking_context(db, request.location_id)

        if request.party_size > reservation_settings.max_party_size_online:
            raise PartyTooLarge(reservation_settings.max_party_size_online)

        # Re-verify the slot right before allocating
        requested_time = normalize_time(request.time)
        slots = await oracle.available_slots(
            db, location, reservation_settings, request.date, request.party_size
        )
        if not any(slot_matches(slot, requested_time) for slot in slots):
            raise SlotUnavailable()

        candidates = select_candidate_tables(
            await load_location_tables(db, location.id), request.party_size
        )
        if not candidates:
            raise NoSuitableTable()

        duration = reservation_settings.default_duration_minutes
        requested = Interval.starting_at(request.date, requested_time, duration)
        table = await find_available_table(db, candidates, request.date, requested)
        if table is None:
            raise NoTableAvailable()

        message = reservation_settings.confirmation_message or DEFAULT_CONFIRMATION_MESSAGE
        special = request.special_requests or SpecialRequests()
        draft = BookingDraft(
            location_id=location.id,
            table_id=table.id,
            table_label=table.label,
            reservation_date=request.date,
            reservation_time=requested_time,
            duration_minutes=duration,
            party_size=request.party_size,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_email=request.customer_email or None,
            wants_loyalty_enrollment=request.wants_loyalty_enrollment,
            special_accommodations=special.model_dump(),
            alternatives=[(t.id, t.label) for t in candidates[candidates.index(table) + 1:]],
        )
    except BookingError as e:
        log.info("Online booking rejected", reason=e.reason)
        raise
    except SQLAlchemyError as e:
        log.error("Failed to read booking data", error=str(e))
        raise BookingFailed() from e

    try:
        reservation = await coordinator.commit(db, draft)
    except BookingError as e:
        log.info("Online booking rejected", reason=e.reason)
        raise

    log.info(
        "Online booking confirmed",
        reservation_id=str(reservation.id),
        confirmation_code=reservation.confirmation_code,
        table=draft.table_label,
    )

    return BookingResponse(
        reservation_id=reservation.id,
        confirmation_code=reservation.confirmation_code,
        table_label=draft.table_label,
        date=draft.reservation_date,
        time=draft.reservation_time.strftime("%H:%M"),
        party_size=draft.party_size,
        duration=draft.duration_minutes,
        message=message,
    )


def _settings_summary(reservation_settings: ReservationSettings, hours=None) -> AvailabilitySettings:
    return AvailabilitySettings(
        opening_time=hours.open_time.strftime("%H:%M") if hours and hours.open_time else None,
        closing_time=hours.close_time.strftime("%H:%M") if hours and hours.close_time else None,
        max_party_size_online=reservation_settings.max_party_size_online,
        default_duration_minutes=reservation_settings.default_duration_minutes,
        time_slot_interval=reservation_settings.time_slot_interval,
        min_advance_hours=reservation_settings.min_advance_hours,
        max_advance_days=reservation_settings.max_advance_days,
    )


async def check_availability(
    db: AsyncSession,
    location_id: UUID,
    on_date: date,
    party_size: int,
    *,
    oracle: SlotAvailabilityOracle,
    today: date = None,
) -> AvailabilityResponse:
    """Bookable slots for the public booking page"""
    try:
        location, reservation_settings = await load_booking_context(db, location_id)

        if party_size > reservation_settings.max_party_size_online:
            return AvailabilityResponse(
                settings=_settings_summary(reservation_settings),
                message=(
                    f"For parties of {reservation_settings.max_party_size_online + 1}+, "
                    "please call the restaurant to reserve."
                ),
                requires_call=True,
            )

        today = today or location_now(location).date()
        if on_date < today:
            raise InvalidBookingDate("Cannot book reservations in the past")
        if on_date > today + timedelta(days=reservation_settings.max_advance_days):
            raise InvalidBookingDate(
                f"Reservations can only be made up to {reservation_settings.max_advance_days} days in advance"
            )

        hours = await load_operating_hours(db, location.id, on_date)
        if not is_open(hours):
            return AvailabilityResponse(
                settings=_settings_summary(reservation_settings),
                message="The restaurant is closed on this day.",
                is_closed=True,
            )

        slots = await oracle.available_slots(db, location, reservation_settings, on_date, party_size)
    except SQLAlchemyError as e:
        logger.error("Failed to check availability", location_id=str(location_id), error=str(e))
        raise BookingFailed("Failed to check availability") from e

    return AvailabilityResponse(
        available_slots=[slot.strftime("%H:%M") for slot in slots],
        settings=_settings_summary(reservation_settings, hours),
    )
