"""Background job tasks"""

from datetime import datetime
from typing import Optional
from uuid import UUID
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from tableside.jobs.celery_app import celery_app
from tableside.loyalty import enroll_customer
from tableside.models.location import ReservationSettings
from tableside.models.reservation import Reservation, ReservationTable
from tableside.notifications.email import EmailDispatcher
from tableside.notifications.templates import render_confirmation

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


async def _load_reservation(db: AsyncSession, reservation_id: UUID) -> Optional[Reservation]:
    result = await db.execute(
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .options(
            selectinload(Reservation.location),
            selectinload(Reservation.table_assignment).selectinload(ReservationTable.table),
        )
    )
    return result.scalar_one_or_none()


async def send_reservation_confirmation(
    db: AsyncSession,
    reservation_id: UUID,
    dispatcher: EmailDispatcher,
) -> bool:
    """Email the guest and stamp confirmation_sent_at; False if nothing was sent"""
    reservation = await _load_reservation(db, reservation_id)
    if reservation is None or not reservation.customer_email:
        return False

    if not dispatcher.configured:
        logger.warning("Email not configured, skipping confirmation", reservation_id=str(reservation_id))
        return False

    result = await db.execute(
        select(ReservationSettings).where(
            ReservationSettings.location_id == reservation.location_id
        )
    )
    reservation_settings = result.scalar_one_or_none()

    assignment = reservation.table_assignment
    table_label = assignment.table.label if assignment and assignment.table else None

    message = render_confirmation(reservation, reservation.location, reservation_settings, table_label)
    await dispatcher.send(
        sender_name=reservation.location.name,
        to=reservation.customer_email,
        subject=message.subject,
        html=message.html,
        text=message.text,
    )

    reservation.confirmation_sent_at = datetime.utcnow()
    await db.commit()

    logger.info("Sent reservation confirmation", reservation_id=str(reservation_id))
    return True


async def run_post_commit(
    db: AsyncSession,
    reservation_id: UUID,
    dispatcher: Optional[EmailDispatcher] = None,
) -> dict:
    """
    Best-effort follow-up to a committed booking.

    Loyalty enrollment and the confirmation email run independently; a
    failure in either is logged and dropped.
    """
    outcome = {"loyalty": "skipped", "confirmation": "skipped"}

    reservation = await _load_reservation(db, reservation_id)
    if reservation is None:
        logger.warning("Reservation not found for post-booking jobs", reservation_id=str(reservation_id))
        return outcome

    location_id = reservation.location_id
    customer_name = reservation.customer_name
    customer_phone = reservation.customer_phone
    customer_email = reservation.customer_email
    wants_loyalty = reservation.wants_loyalty_enrollment

    if wants_loyalty and customer_phone:
        try:
            await enroll_customer(db, location_id, customer_name, customer_phone, customer_email)
            outcome["loyalty"] = "enrolled"
        except Exception as e:
            await db.rollback()
            outcome["loyalty"] = "failed"
            logger.error(
                "Loyalty enrollment failed",
                reservation_id=str(reservation_id),
                error=str(e),
            )

    if customer_email:
        try:
            sent = await send_reservation_confirmation(db, reservation_id, dispatcher or EmailDispatcher())
            outcome["confirmation"] = "sent" if sent else "skipped"
        except Exception as e:
            await db.rollback()
            outcome["confirmation"] = "failed"
            logger.error(
                "Failed to send reservation confirmation",
                reservation_id=str(reservation_id),
                error=str(e),
            )

    return outcome


@celery_app.task(name="post_commit_pipeline")
def post_commit_pipeline(reservation_id: str):
    """Loyalty enrollment and confirmation email for a new booking"""
    logger.info("Running post-booking jobs", reservation_id=reservation_id)

    async def _run():
        from tableside.database import SessionLocal, engine

        try:
            async with SessionLocal() as db:
                return await run_post_commit(db, UUID(reservation_id))
        finally:
            # Pooled connections are bound to this event loop
            await engine.dispose()

    outcome = run_async(_run())
    logger.info("Post-booking jobs finished", reservation_id=reservation_id, **outcome)


def dispatch_post_commit(reservation_id) -> None:
    """Queue post-booking jobs; a broker failure is logged and dropped"""
    try:
        post_commit_pipeline.apply_async(args=[str(reservation_id)], retry=False)
    except Exception as e:
        logger.error(
            "Failed to queue post-booking jobs",
            reservation_id=str(reservation_id),
            error=str(e),
        )
