"""Test configuration and fixtures"""

from datetime import date, time
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tableside.main import app
from tableside.api import public_reservations
from tableside.booking.availability import SlotAvailabilityOracle, get_slot_oracle
from tableside.database import Base, get_db
from tableside.models import (
    Location,
    ReservationSettings,
    SeatingMap,
    SeatingTable,
    Reservation,
    ReservationTable,
)


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BOOKING_DATE = date(2031, 5, 16)


class StaticSlotOracle(SlotAvailabilityOracle):
    """Slot oracle returning a fixed list and counting calls"""

    def __init__(self, slots):
        self.slots = list(slots)
        self.calls = 0

    async def available_slots(self, db, location, settings, on_date, party_size):
        self.calls += 1
        return list(self.slots)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_location(test_db):
    """Create a location with online booking enabled"""
    location = Location(
        id=uuid4(),
        name="Test Bistro",
        address="1 Test Street",
        timezone="America/New_York",
        ordering_enabled=True,
    )
    test_db.add(location)
    await test_db.flush()

    settings = ReservationSettings(
        location_id=location.id,
        online_reservations_enabled=True,
        max_party_size_online=8,
        default_duration_minutes=90,
        time_slot_interval=30,
        min_advance_hours=0,
        max_advance_days=30,
        confirmation_message="See you soon!",
    )
    test_db.add(settings)
    await test_db.commit()

    return location


@pytest.fixture
async def test_settings(test_db, test_location):
    """Reservation settings of the test location"""
    from sqlalchemy import select

    result = await test_db.execute(
        select(ReservationSettings).where(ReservationSettings.location_id == test_location.id)
    )
    return result.scalar_one()


@pytest.fixture
async def test_tables(test_db, test_location):
    """One 4-top and one 6-top on an active seating map"""
    seating_map = SeatingMap(id=uuid4(), location_id=test_location.id, name="Main Room", is_active=True)
    test_db.add(seating_map)
    await test_db.flush()

    four_top = SeatingTable(id=uuid4(), seating_map_id=seating_map.id, label="A4", capacity=4, is_active=True)
    six_top = SeatingTable(id=uuid4(), seating_map_id=seating_map.id, label="B6", capacity=6, is_active=None)
    test_db.add_all([four_top, six_top])
    await test_db.commit()

    return {"A4": four_top, "B6": six_top}


@pytest.fixture
def make_reservation(test_db):
    """Factory writing a reservation and its table assignment"""
    counter = {"n": 0}

    async def _make(
        location_id,
        table_id,
        start,
        duration_minutes=90,
        status="confirmed",
        on_date=BOOKING_DATE,
        party_size=4,
        **fields,
    ):
        counter["n"] += 1
        reservation = Reservation(
            id=uuid4(),
            location_id=location_id,
            customer_name=fields.pop("customer_name", "Existing Guest"),
            customer_phone=fields.pop("customer_phone", "+1 (555) 010-0000"),
            reservation_date=on_date,
            reservation_time=start,
            duration_minutes=duration_minutes,
            party_size=party_size,
            status=status,
            source="staff",
            confirmation_code=fields.pop("confirmation_code", f"TEST-{counter['n']:04d}"),
            **fields,
        )
        test_db.add(reservation)
        await test_db.flush()
        test_db.add(ReservationTable(reservation_id=reservation.id, table_id=table_id))
        await test_db.commit()
        return reservation

    return _make


@pytest.fixture
def slot_oracle():
    """Every quarter hour from 11:00 to 22:45 is bookable"""
    return StaticSlotOracle(time(hour, minute) for hour in range(11, 23) for minute in (0, 15, 30, 45))


@pytest.fixture
def dispatched(monkeypatch):
    """Capture post-booking job dispatches instead of queueing them"""
    calls = []
    monkeypatch.setattr(public_reservations, "dispatch_post_commit", lambda reservation_id: calls.append(reservation_id))
    return calls


@pytest.fixture
async def client(test_db, slot_oracle, dispatched):
    """Create test client with overridden database and slot oracle"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_slot_oracle] = lambda: slot_oracle

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
