#!/usr/bin/env python3
"""
Seed script to create a demo location with tables and booking settings
"""

import asyncio
import uuid
from datetime import time


async def seed_demo_data():
    """Seed demo data for development"""
    from tableside.database import SessionLocal, engine, Base
    from tableside.models import (
        Location,
        ReservationSettings,
        OperatingHours,
        SeatingMap,
        SeatingTable,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo location already exists
        from sqlalchemy import select
        result = await db.execute(
            select(Location).where(Location.name == "Harbor Street Bistro")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo location...")

        location = Location(
            id=uuid.uuid4(),
            name="Harbor Street Bistro",
            address="123 Harbor Street, Portland, ME",
            timezone="America/New_York",
            ordering_enabled=True,
        )
        db.add(location)
        await db.flush()

        print(f"Created location: {location.name} (ID: {location.id})")

        settings = ReservationSettings(
            location_id=location.id,
            online_reservations_enabled=True,
            max_party_size_online=8,
            default_duration_minutes=90,
            time_slot_interval=15,
            min_advance_hours=1,
            max_advance_days=30,
            confirmation_message="We look forward to seeing you!",
        )
        db.add(settings)

        # Sunday = 0
        hours = {
            0: (time(12, 0), time(21, 0)),
            1: None,
            2: (time(17, 0), time(22, 0)),
            3: (time(17, 0), time(22, 0)),
            4: (time(17, 0), time(22, 0)),
            5: (time(17, 0), time(23, 0)),
            6: (time(12, 0), time(23, 0)),
        }
        for day, window in hours.items():
            db.add(OperatingHours(
                location_id=location.id,
                day_of_week=day,
                is_open=window is not None,
                open_time=window[0] if window else None,
                close_time=window[1] if window else None,
            ))

        print("Creating seating map...")

        seating_map = SeatingMap(location_id=location.id, name="Main Dining Room", is_active=True)
        db.add(seating_map)
        await db.flush()

        tables = [
            ("T1", 2), ("T2", 2), ("T3", 2),
            ("T4", 4), ("T5", 4), ("T6", 4),
            ("T7", 6), ("T8", 6),
            ("B1", 8),
        ]
        for label, capacity in tables:
            db.add(SeatingTable(seating_map_id=seating_map.id, label=label, capacity=capacity))

        await db.commit()

        print(f"""
Demo data created successfully!

Location: Harbor Street Bistro
  ID: {location.id}

Seating: {len(tables)} tables on "Main Dining Room"
Online booking: parties up to 8, 90 minute seatings
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
