"""Durable commit of a reservation together with its table assignment"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.booking.codes import ConfirmationCodeIssuer
from tableside.booking.errors import BookingFailed, NoTableAvailable
from tableside.booking.intervals import Interval
from tableside.booking.resolver import table_is_free
from tableside.config import settings
from tableside.models.reservation import (
    Reservation,
    ReservationTable,
    ReservationStatus,
    ReservationSource,
)

logger = structlog.get_logger()


@dataclass
class BookingDraft:
    """Everything needed to write a booking for an already chosen table"""
    location_id: UUID
    table_id: UUID
    table_label: str
    reservation_date: date
    reservation_time: time
    duration_minutes: int
    party_size: int
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    wants_loyalty_enrollment: bool = False
    special_accommodations: dict = field(default_factory=dict)
    # Remaining (table_id, table_label) candidates, best fit first
    alternatives: List[Tuple[UUID, str]] = field(default_factory=list)

    @property
    def interval(self) -> Interval:
        return Interval.starting_at(self.reservation_date, self.reservation_time, self.duration_minutes)


class ConfirmationCodeTaken(Exception):
    """The issued code hit the unique constraint on insert"""


class BookingCoordinator:
    """
    Writes the Reservation and its ReservationTable as one unit.

    Both rows are flushed inside the session's transaction and committed
    together. If the assignment cannot be written the unit is rolled back
    and any reservation row that is still visible is deleted, so no reader
    ever sees a reservation without a table.
    """

    def __init__(
        self,
        issuer: Optional[ConfirmationCodeIssuer] = None,
        code_retries: Optional[int] = None,
    ):
        self.issuer = issuer or ConfirmationCodeIssuer()
        self.code_retries = settings.booking_code_retries if code_retries is None else code_retries

    async def commit(self, db: AsyncSession, draft: BookingDraft) -> Reservation:
        for attempt in range(self.code_retries + 1):
            code = await self.issuer.issue(db)
            try:
                return await self._commit_once(db, draft, code)
            except ConfirmationCodeTaken:
                logger.warning(
                    "Confirmation code already taken, reissuing",
                    location_id=str(draft.location_id),
                    attempt=attempt + 1,
                )

        logger.error("Could not issue a unique confirmation code", location_id=str(draft.location_id))
        raise BookingFailed()

    async def _commit_once(self, db: AsyncSession, draft: BookingDraft, code: str) -> Reservation:
        await self._claim_table(db, draft)

        try:
            reservation = await self._insert_reservation(db, draft, code)
        except IntegrityError as exc:
            await db.rollback()
            if "confirmation_code" in str(exc.orig):
                raise ConfirmationCodeTaken(code) from exc
            logger.error("Failed to create reservation", error=str(exc))
            raise BookingFailed() from exc
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Failed to create reservation", error=str(exc))
            raise BookingFailed() from exc

        reservation_id = reservation.id

        try:
            await self._assign_table(db, reservation_id, draft.table_id)
            await db.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to assign table, compensating",
                reservation_id=str(reservation_id),
                table_id=str(draft.table_id),
                error=str(exc),
            )
            await self._compensate(db, reservation_id)
            raise BookingFailed("Failed to assign table") from exc

        logger.info(
            "Reservation committed",
            reservation_id=str(reservation_id),
            table_id=str(draft.table_id),
        )
        return reservation

    async def _claim_table(self, db: AsyncSession, draft: BookingDraft) -> None:
        """
        Lock and re-check the chosen table, falling through to the next free
        alternative if it was taken meanwhile. Moves the draft to the table
        that was claimed.
        """
        choices = [(draft.table_id, draft.table_label)] + list(draft.alternatives)
        for index, (table_id, table_label) in enumerate(choices):
            await self._lock_table(db, table_id, draft.reservation_date)
            if await table_is_free(db, table_id, draft.reservation_date, draft.interval):
                if table_id != draft.table_id:
                    logger.info(
                        "Table taken before commit, moved to next candidate",
                        location_id=str(draft.location_id),
                        taken_table_id=str(draft.table_id),
                        table_id=str(table_id),
                    )
                draft.table_id = table_id
                draft.table_label = table_label
                draft.alternatives = list(choices[index + 1:])
                return

        await db.rollback()
        logger.info(
            "All candidate tables taken before commit",
            location_id=str(draft.location_id),
            table_id=str(draft.table_id),
        )
        raise NoTableAvailable()

    async def _lock_table(self, db: AsyncSession, table_id: UUID, on_date: date) -> None:
        # Serializes commits per (table, date) until the transaction ends.
        # Other backends keep the read-then-write window.
        if db.bind.dialect.name != "postgresql":
            return
        await db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"{table_id}:{on_date.isoformat()}"},
        )

    async def _insert_reservation(self, db: AsyncSession, draft: BookingDraft, code: str) -> Reservation:
        reservation = Reservation(
            location_id=draft.location_id,
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            customer_email=draft.customer_email,
            wants_loyalty_enrollment=draft.wants_loyalty_enrollment,
            reservation_date=draft.reservation_date,
            reservation_time=draft.reservation_time,
            duration_minutes=draft.duration_minutes,
            party_size=draft.party_size,
            special_accommodations=draft.special_accommodations,
            status=ReservationStatus.CONFIRMED.value,
            source=ReservationSource.ONLINE.value,
            confirmation_code=code,
            created_by=None,
        )
        db.add(reservation)
        await db.flush()
        return reservation

    async def _assign_table(self, db: AsyncSession, reservation_id: UUID, table_id: UUID) -> ReservationTable:
        assignment = ReservationTable(reservation_id=reservation_id, table_id=table_id)
        db.add(assignment)
        await db.flush()
        return assignment

    async def _compensate(self, db: AsyncSession, reservation_id: UUID) -> None:
        await db.rollback()
        try:
            result = await db.execute(select(Reservation.id).where(Reservation.id == reservation_id))
            if result.first() is None:
                return
            await db.execute(delete(Reservation).where(Reservation.id == reservation_id))
            await db.commit()
            logger.warning("Deleted orphaned reservation", reservation_id=str(reservation_id))
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "Compensation failed, reservation needs manual cleanup",
                reservation_id=str(reservation_id),
                error=str(exc),
            )
