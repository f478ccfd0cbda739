"""Time-conflict resolution between a requested interval and existing bookings"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.booking.intervals import Interval
from tableside.models.reservation import Reservation, ReservationTable, TERMINAL_STATUSES
from tableside.models.seating import SeatingTable


async def load_table_bookings(
    db: AsyncSession,
    table_ids: Iterable[UUID],
    on_date: date,
) -> Dict[UUID, List[Interval]]:
    """Intervals held by non-terminal reservations, keyed by table, for one date"""
    table_ids = list(table_ids)
    if not table_ids:
        return {}

    result = await db.execute(
        select(
            ReservationTable.table_id,
            Reservation.reservation_date,
            Reservation.reservation_time,
            Reservation.duration_minutes,
        )
        .join(Reservation, ReservationTable.reservation_id == Reservation.id)
        .where(
            ReservationTable.table_id.in_(table_ids),
            Reservation.reservation_date == on_date,
            Reservation.status.not_in(TERMINAL_STATUSES),
        )
    )

    bookings: Dict[UUID, List[Interval]] = defaultdict(list)
    for row in result.all():
        bookings[row.table_id].append(
            Interval.starting_at(row.reservation_date, row.reservation_time, row.duration_minutes)
        )
    return bookings


def has_conflict(requested: Interval, existing: Iterable[Interval]) -> bool:
    return any(requested.overlaps(interval) for interval in existing)


def first_free_table(
    candidates: Sequence[SeatingTable],
    requested: Interval,
    bookings: Dict[UUID, List[Interval]],
) -> Optional[SeatingTable]:
    """First candidate, in order, with no booking overlapping the requested interval"""
    for table in candidates:
        if not has_conflict(requested, bookings.get(table.id, ())):
            return table
    return None


async def find_available_table(
    db: AsyncSession,
    candidates: Sequence[SeatingTable],
    on_date: date,
    requested: Interval,
) -> Optional[SeatingTable]:
    bookings = await load_table_bookings(db, [table.id for table in candidates], on_date)
    return first_free_table(candidates, requested, bookings)


async def table_is_free(
    db: AsyncSession,
    table_id: UUID,
    on_date: date,
    requested: Interval,
) -> bool:
    bookings = await load_table_bookings(db, [table_id], on_date)
    return not has_conflict(requested, bookings.get(table_id, ()))
