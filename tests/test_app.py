"""Tests for application wiring: health probes, error handling, log masking"""

from datetime import date, time

import pytest
from sqlalchemy.exc import OperationalError

from tableside.booking import service
from tableside.log import mask_phone_numbers


def test_mask_phone_numbers():
    event = {"event": "Online booking requested", "customer_phone": "+1 (555) 123-4567", "party_size": 4}

    masked = mask_phone_numbers(None, "info", event)

    assert masked["customer_phone"] == "***4567"
    assert masked["party_size"] == 4


def test_mask_leaves_events_without_phone_alone():
    assert mask_phone_numbers(None, "info", {"event": "x"}) == {"event": "x"}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_storage_error_during_reads_is_generic(client, test_location, test_tables, monkeypatch):
    """A database error while reading tables returns a generic 500"""
    async def broken_load(db, location_id):
        raise OperationalError("SELECT ...", {}, Exception("could not connect to server"))

    monkeypatch.setattr(service, "load_location_tables", broken_load)

    response = await client.post(
        "/public-reservation/book",
        json={
            "location_id": str(test_location.id),
            "date": date(2031, 5, 16).isoformat(),
            "time": time(18, 0).strftime("%H:%M"),
            "party_size": 2,
            "customer_name": "Jane Doe",
            "customer_phone": "5551234567",
        },
    )

    assert response.status_code == 500
    assert response.json()["detail"] == {
        "reason": "internal_error",
        "message": "Failed to create reservation",
    }
    assert "could not connect" not in response.text
