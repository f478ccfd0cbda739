"""Integration tests for the public booking endpoint"""

from datetime import date, datetime, time, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from tableside.main import app
from tableside.api.public_reservations import get_booking_coordinator
from tableside.booking import service
from tableside.booking.availability import OperatingHoursOracle, day_of_week, get_slot_oracle
from tableside.booking.coordinator import BookingCoordinator
from tableside.models import OperatingHours, Reservation, ReservationTable

BOOKING_DATE = date(2031, 5, 16)


def booking_payload(location_id, /, start="18:00", party_size=4, **overrides):
    payload = {
        "location_id": str(location_id),
        "date": BOOKING_DATE.isoformat(),
        "time": start,
        "party_size": party_size,
        "customer_name": "Jane Doe",
        "customer_phone": "+1 (555) 123-4567",
        "customer_email": "jane@example.com",
    }
    payload.update(overrides)
    return payload


async def reservation_count(db):
    result = await db.execute(select(func.count()).select_from(Reservation))
    return result.scalar_one()


async def assigned_table(db, reservation_id):
    result = await db.execute(
        select(ReservationTable.table_id).where(ReservationTable.reservation_id == reservation_id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_book_smallest_fitting_table(client, test_db, test_location, test_tables):
    """Scenario: empty floor, party of 4 gets the 4-top"""
    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 200
    data = response.json()
    assert data["table_label"] == "A4"
    assert data["time"] == "18:00"
    assert data["date"] == BOOKING_DATE.isoformat()
    assert data["party_size"] == 4
    assert data["duration"] == 90
    assert data["message"] == "See you soon!"
    assert data["confirmation_code"].startswith("RES-")

    assert await assigned_table(test_db, data["reservation_id"]) == test_tables["A4"].id


@pytest.mark.asyncio
async def test_book_falls_through_to_larger_table(client, test_db, test_location, test_tables, make_reservation):
    """Scenario: 4-top busy 18:00-19:30, a party of 4 at 18:30 gets the 6-top"""
    await make_reservation(test_location.id, test_tables["A4"].id, time(18, 0))

    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, start="18:30"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["table_label"] == "B6"
    assert await assigned_table(test_db, data["reservation_id"]) == test_tables["B6"].id


@pytest.mark.asyncio
async def test_book_touching_boundary_is_free(client, test_location, test_tables, make_reservation):
    """Scenario: 4-top busy 17:00-18:00, a booking starting at 18:00 still gets it"""
    await make_reservation(test_location.id, test_tables["A4"].id, time(17, 0), duration_minutes=60)

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 200
    assert response.json()["table_label"] == "A4"


@pytest.mark.asyncio
async def test_book_no_table_large_enough(client, test_db, test_location, test_settings, test_tables):
    """Scenario: party of 12 with no table that seats 12"""
    test_settings.max_party_size_online = 12
    await test_db.commit()

    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, party_size=12),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "no_suitable_table"
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_stale_slot_rejected_before_selection(
    client, test_db, test_location, test_tables, slot_oracle, monkeypatch
):
    """Scenario: the slot is gone by the time the guest submits"""
    slot_oracle.slots = []
    selections = []
    original = service.select_candidate_tables

    def spy(tables, party_size):
        selections.append(party_size)
        return original(tables, party_size)

    monkeypatch.setattr(service, "select_candidate_tables", spy)

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["reason"] == "slot_unavailable"
    assert detail["message"] == "This time slot is no longer available. Please select another time."
    assert slot_oracle.calls == 1
    assert selections == []
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_all_fitting_tables_taken(client, test_db, test_location, test_tables, make_reservation):
    await make_reservation(test_location.id, test_tables["A4"].id, time(18, 0))
    await make_reservation(test_location.id, test_tables["B6"].id, time(17, 30))

    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, start="18:30"),
    )

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "no_table_available"
    assert await reservation_count(test_db) == 2


@pytest.mark.asyncio
async def test_cancelled_reservation_does_not_block(client, test_location, test_tables, make_reservation):
    await make_reservation(test_location.id, test_tables["A4"].id, time(18, 0), status="cancelled")
    await make_reservation(test_location.id, test_tables["A4"].id, time(18, 0), status="no_show")

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 200
    assert response.json()["table_label"] == "A4"


@pytest.mark.asyncio
async def test_book_unknown_location(client, test_db):
    response = await client.post("/public-reservation/book", json=booking_payload(uuid4()))

    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "location_not_found"


@pytest.mark.asyncio
async def test_book_online_reservations_disabled(client, test_db, test_location, test_settings, test_tables):
    test_settings.online_reservations_enabled = False
    await test_db.commit()

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "booking_disabled"
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_ordering_disabled(client, test_db, test_location, test_tables):
    test_location.ordering_enabled = False
    await test_db.commit()

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["reason"] == "booking_disabled"
    assert detail["message"] == "Online ordering is not enabled for this location"


@pytest.mark.asyncio
async def test_book_party_too_large(client, test_db, test_location, test_tables):
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, party_size=9),
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["reason"] == "party_too_large"
    assert detail["message"] == "For parties of 9+, please call to reserve"
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"party_size": 0},
        {"customer_name": ""},
        {"date": "not-a-date"},
        {"time": "25:99"},
        {"location_id": "not-a-uuid"},
    ],
)
async def test_book_malformed_request(client, test_db, test_location, test_tables, overrides):
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, **overrides),
    )

    assert response.status_code == 422
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_stores_guest_details(client, test_db, test_location, test_tables):
    payload = booking_payload(
        test_location.id,
        customer_name="  Jane Doe ",
        wants_loyalty_enrollment=True,
        special_requests={"allergies": "peanuts", "occasion": "birthday", "high_chair": True},
    )

    response = await client.post("/public-reservation/book", json=payload)

    assert response.status_code == 200
    result = await test_db.execute(select(Reservation))
    reservation = result.scalar_one()
    assert reservation.customer_name == "Jane Doe"
    assert reservation.wants_loyalty_enrollment is True
    assert reservation.status == "confirmed"
    assert reservation.source == "online"
    assert reservation.created_by is None
    assert reservation.special_accommodations == {
        "allergies": "peanuts",
        "notes": "",
        "occasion": "birthday",
        "wheelchair": False,
        "high_chair": True,
    }


@pytest.mark.asyncio
async def test_book_queues_post_booking_jobs(client, test_location, test_tables, dispatched):
    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 200
    assert [str(reservation_id) for reservation_id in dispatched] == [response.json()["reservation_id"]]


@pytest.mark.asyncio
async def test_rejected_booking_queues_nothing(client, test_location, test_tables, dispatched):
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, party_size=9),
    )

    assert response.status_code == 400
    assert dispatched == []


@pytest.mark.asyncio
async def test_book_storage_failure_is_generic(client, test_db, test_location, test_tables, dispatched):
    """Internal errors surface as a generic 500 with no detail leaked"""

    class BrokenCoordinator(BookingCoordinator):
        async def _assign_table(self, db, reservation_id, table_id):
            raise SQLAlchemyError("relation reservation_tables does not exist")

    location_id = test_location.id
    app.dependency_overrides[get_booking_coordinator] = lambda: BrokenCoordinator()

    response = await client.post("/public-reservation/book", json=booking_payload(location_id))

    assert response.status_code == 500
    assert response.json()["detail"] == {
        "reason": "internal_error",
        "message": "Failed to assign table",
    }
    assert await reservation_count(test_db) == 0
    assert dispatched == []


@pytest.mark.asyncio
async def test_sequential_bookings_fill_the_floor(client, test_db, test_location, test_tables):
    """Two parties at the same time take both tables, a third is turned away"""
    labels = []
    for _ in range(2):
        response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))
        assert response.status_code == 200
        labels.append(response.json()["table_label"])

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert labels == ["A4", "B6"]
    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "no_table_available"


@pytest.fixture
def opening_hours_oracle(test_db, test_location):
    """Serve slots from 17:00-22:00 opening hours, as seen the day before"""
    async def _install():
        test_db.add(OperatingHours(
            location_id=test_location.id,
            day_of_week=day_of_week(BOOKING_DATE),
            is_open=True,
            open_time=time(17, 0),
            close_time=time(22, 0),
        ))
        await test_db.commit()

        def clock(location):
            return datetime.combine(BOOKING_DATE - timedelta(days=1), time(9, 0))

        app.dependency_overrides[get_slot_oracle] = lambda: OperatingHoursOracle(clock=clock)

    return _install


@pytest.mark.asyncio
async def test_book_party_larger_than_any_table_with_opening_hours(
    client, test_db, test_location, test_settings, test_tables, opening_hours_oracle
):
    """With real opening hours, a party no table can seat is a capacity rejection"""
    test_settings.max_party_size_online = 12
    await test_db.commit()
    await opening_hours_oracle()

    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, party_size=12),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "no_suitable_table"
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_with_opening_hours(client, test_db, test_location, test_tables, opening_hours_oracle):
    await opening_hours_oracle()

    response = await client.post("/public-reservation/book", json=booking_payload(test_location.id))

    assert response.status_code == 200
    assert response.json()["table_label"] == "A4"


@pytest.mark.asyncio
async def test_book_time_off_the_slot_grid(client, test_db, test_location, test_tables):
    """Seconds count: 18:00:45 is not the 18:00 slot"""
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, start="18:00:45"),
    )

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "slot_unavailable"
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["customer_name", "customer_phone"])
async def test_book_blank_guest_details_rejected(client, test_db, test_location, test_tables, field):
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, **{field: "   "}),
    )

    assert response.status_code == 422
    assert await reservation_count(test_db) == 0


@pytest.mark.asyncio
async def test_book_blank_email_stored_as_none(client, test_db, test_location, test_tables):
    response = await client.post(
        "/public-reservation/book",
        json=booking_payload(test_location.id, customer_email="  "),
    )

    assert response.status_code == 200
    result = await test_db.execute(select(Reservation.customer_email))
    assert result.scalar_one() is None
