"""Public (unauthenticated) reservation booking endpoints"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.booking.availability import SlotAvailabilityOracle, get_slot_oracle
from tableside.booking.coordinator import BookingCoordinator
from tableside.booking.errors import BookingError
from tableside.booking.service import book_reservation, check_availability
from tableside.database import get_db
from tableside.jobs.tasks import dispatch_post_commit
from tableside.schemas.reservation import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingRequest,
    BookingResponse,
)

router = APIRouter()
logger = structlog.get_logger()


def get_booking_coordinator() -> BookingCoordinator:
    """FastAPI dependency returning the booking coordinator"""
    return BookingCoordinator()


def _rejection(exc: BookingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@router.post("/availability", response_model=AvailabilityResponse)
async def availability(
    request: AvailabilityRequest,
    db: AsyncSession = Depends(get_db),
    oracle: SlotAvailabilityOracle = Depends(get_slot_oracle),
):
    """List bookable times for a date and party size"""
    try:
        return await check_availability(
            db,
            request.location_id,
            request.date,
            request.party_size,
            oracle=oracle,
        )
    except BookingError as exc:
        raise _rejection(exc) from exc


@router.post("/book", response_model=BookingResponse)
async def book(
    request: BookingRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    oracle: SlotAvailabilityOracle = Depends(get_slot_oracle),
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Book a table online"""
    try:
        confirmation = await book_reservation(
            db,
            request,
            oracle=oracle,
            coordinator=coordinator,
        )
    except BookingError as exc:
        raise _rejection(exc) from exc

    # Runs after the response is sent; never affects the booking outcome
    background_tasks.add_task(dispatch_post_commit, confirmation.reservation_id)

    return confirmation
