"""Loyalty program enrollment for guests who opt in while booking"""

import re
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.models.customer import Customer

logger = structlog.get_logger()


def normalize_phone(phone: str) -> str:
    """Strip everything but digits"""
    return re.sub(r"\D", "", phone or "")


def split_name(full_name: str) -> Tuple[str, str]:
    parts = (full_name or "").strip().split()
    first = parts[0] if parts else "Guest"
    return first, " ".join(parts[1:])


async def enroll_customer(
    db: AsyncSession,
    location_id: UUID,
    full_name: str,
    phone: str,
    email: Optional[str] = None,
) -> Customer:
    """
    Mark the guest as a loyalty member, creating their profile if needed.

    Existing members are left untouched. Profiles are keyed by location and
    the digits of the phone number.
    """
    clean_phone = normalize_phone(phone)
    first_name, last_name = split_name(full_name)

    result = await db.execute(
        select(Customer).where(
            Customer.phone == clean_phone,
            Customer.location_id == location_id,
        )
    )
    customer = result.scalar_one_or_none()

    if customer:
        if not customer.is_loyalty_member:
            customer.first_name = first_name
            customer.last_name = last_name
            customer.email = email
            customer.is_loyalty_member = True
            await db.commit()
            logger.info("Existing customer enrolled in loyalty", customer_id=str(customer.id))
        return customer

    customer = Customer(
        location_id=location_id,
        first_name=first_name,
        last_name=last_name,
        phone=clean_phone,
        email=email,
        is_loyalty_member=True,
        loyalty_points=0,
        total_spent_cents=0,
        total_visits=0,
    )
    db.add(customer)
    await db.commit()
    logger.info("New loyalty customer created", customer_id=str(customer.id))
    return customer
