"""Reservation confirmation message rendering"""

from dataclasses import dataclass
from html import escape
from typing import Optional

from tableside.models.location import Location, ReservationSettings
from tableside.models.reservation import Reservation


@dataclass
class RenderedMessage:
    subject: str
    text: str
    html: str


def render_confirmation(
    reservation: Reservation,
    location: Location,
    settings: Optional[ReservationSettings],
    table_label: Optional[str] = None,
) -> RenderedMessage:
    """Build the confirmation email for a committed reservation"""
    restaurant = location.name
    when = (
        f"{reservation.reservation_date.strftime('%A, %B %d')} at "
        f"{reservation.reservation_time.strftime('%I:%M %p').lstrip('0')}"
    )
    guests = f"{reservation.party_size} guest{'s' if reservation.party_size != 1 else ''}"
    closing = (settings.confirmation_message if settings else None) or "Thank you for your reservation!"

    subject = f"Your reservation at {restaurant} is confirmed"

    lines = [
        f"Hi {reservation.customer_name},",
        "",
        f"Your table for {guests} on {when} is confirmed.",
        f"Confirmation code: {reservation.confirmation_code}",
    ]
    if table_label:
        lines.append(f"Table: {table_label}")
    if location.address:
        lines.append(f"Address: {location.address}")
    lines += ["", closing]
    text = "\n".join(lines)

    details = [
        f"<p>Your table for <strong>{escape(guests)}</strong> on <strong>{escape(when)}</strong> is confirmed.</p>",
        f"<p>Confirmation code: <strong>{escape(reservation.confirmation_code)}</strong></p>",
    ]
    if table_label:
        details.append(f"<p>Table: {escape(table_label)}</p>")
    if location.address:
        details.append(f"<p>{escape(location.address)}</p>")

    html = (
        "<!DOCTYPE html><html><body>"
        f"<h1>{escape(restaurant)}</h1>"
        f"<p>Hi {escape(reservation.customer_name)},</p>"
        + "".join(details)
        + f"<p>{escape(closing)}</p>"
        "</body></html>"
    )

    return RenderedMessage(subject=subject, text=text, html=html)
