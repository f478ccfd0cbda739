"""Bookable time slots for a location, date and party size"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.booking.intervals import Interval
from tableside.booking.resolver import first_free_table, load_table_bookings
from tableside.booking.selector import load_location_tables, select_candidate_tables
from tableside.models.location import BlackoutDate, Location, OperatingHours, ReservationSettings

logger = structlog.get_logger()


def day_of_week(on_date: date) -> int:
    """0 = Sunday ... 6 = Saturday"""
    return (on_date.weekday() + 1) % 7


def location_now(location: Location) -> datetime:
    """Current wall-clock time at the location, naive"""
    zone = ZoneInfo(location.timezone or "UTC")
    return datetime.now(zone).replace(tzinfo=None)


class SlotAvailabilityOracle(ABC):
    """Source of the time slots still bookable for a party"""

    @abstractmethod
    async def available_slots(
        self,
        db: AsyncSession,
        location: Location,
        settings: ReservationSettings,
        on_date: date,
        party_size: int,
    ) -> List[time]:
        """Return bookable start times in ascending order"""
        pass


class OperatingHoursOracle(SlotAvailabilityOracle):
    """
    Derives slots from the location's opening hours.

    A slot is offered when it lies inside the booking window, the whole
    reservation fits before closing time, and at least one table that can
    seat the party is free for the default duration. When no table is large
    enough, any free active table keeps the slot open and the booking flow
    reports the capacity problem itself.
    """

    def __init__(self, clock=None):
        self.clock = clock or location_now

    async def available_slots(
        self,
        db: AsyncSession,
        location: Location,
        settings: ReservationSettings,
        on_date: date,
        party_size: int,
    ) -> List[time]:
        now = self.clock(location)
        if not self.within_window(settings, on_date, now.date()):
            return []

        if await is_blackout(db, location.id, on_date):
            logger.info("Blackout date", location_id=str(location.id), date=on_date.isoformat())
            return []

        hours = await load_operating_hours(db, location.id, on_date)
        if not is_open(hours):
            return []

        earliest = now + timedelta(hours=settings.min_advance_hours or 0)
        duration = settings.default_duration_minutes
        tables = await load_location_tables(db, location.id)
        # Capacity is rejected by the booking flow, so a party no table can
        # seat still sees the times when the floor has room
        candidates = select_candidate_tables(tables, party_size) or select_candidate_tables(tables, 1)
        if not candidates:
            return []
        bookings = await load_table_bookings(db, [table.id for table in candidates], on_date)

        slots = []
        for slot in self.slot_starts(on_date, hours.open_time, hours.close_time, settings.time_slot_interval, duration):
            if slot < earliest:
                continue
            requested = Interval(start=slot, end=slot + timedelta(minutes=duration))
            if first_free_table(candidates, requested, bookings) is not None:
                slots.append(slot.time())
        return slots

    @staticmethod
    def within_window(settings: ReservationSettings, on_date: date, today: date) -> bool:
        if on_date < today:
            return False
        return on_date <= today + timedelta(days=settings.max_advance_days)

    @staticmethod
    def slot_starts(on_date: date, open_time: time, close_time: time, interval_minutes: int, duration_minutes: int):
        start = datetime.combine(on_date, open_time)
        close = datetime.combine(on_date, close_time)
        if close <= start:
            # Closes after midnight
            close += timedelta(days=1)
        step = timedelta(minutes=interval_minutes or 15)
        duration = timedelta(minutes=duration_minutes)
        slot = start
        while slot + duration <= close and slot.date() == on_date:
            yield slot
            slot += step


async def is_blackout(db: AsyncSession, location_id, on_date: date) -> bool:
    result = await db.execute(
        select(BlackoutDate.id).where(
            BlackoutDate.location_id == location_id,
            BlackoutDate.blackout_date == on_date,
        ).limit(1)
    )
    return result.first() is not None


async def load_operating_hours(db: AsyncSession, location_id, on_date: date) -> Optional[OperatingHours]:
    result = await db.execute(
        select(OperatingHours).where(
            OperatingHours.location_id == location_id,
            OperatingHours.day_of_week == day_of_week(on_date),
        )
    )
    return result.scalars().first()


def is_open(hours: Optional[OperatingHours]) -> bool:
    return bool(hours and hours.is_open and hours.open_time and hours.close_time)


def get_slot_oracle() -> SlotAvailabilityOracle:
    """FastAPI dependency returning the slot oracle"""
    return OperatingHoursOracle()
