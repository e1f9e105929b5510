"""
Bookings: create/list/cancel, CSV export, tickets and QR payloads.

A booking stores snapshots of the user and event as they were when booked, so
exports and tickets keep working after profile or event edits. A user can hold
at most one booking per event.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime
from zoneinfo import ZoneInfo
from pathlib import Path

from eventbook.core.errors import ConflictError, NotFoundError, ValidationError
from eventbook.core.time import ensure_tz
from eventbook.domain.models import Booking, BookingConfirmation, BookingEvent, BookingUser, Event, User
from eventbook.services.events import get_event
from eventbook.services.users import get_user
from eventbook.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

BOOKINGS = "bookings"

CSV_COLUMNS: list[tuple[str, str]] = [
    ("booking_id", "Booking ID"),
    ("first_name", "First Name"),
    ("last_name", "Last Name"),
    ("phone_number", "Phone Number"),
    ("email", "Email"),
    ("event_name", "Event Name"),
    ("event_date_time", "Event Date and Time"),
    ("event_location", "Event Location"),
]


def _owned_by(user_id: str, event_id: str | None = None):
    def predicate(doc: dict) -> bool:
        if doc["user"]["user_id"] != user_id:
            return False
        return event_id is None or doc["event"]["event_id"] == event_id

    return predicate


def build_qr_payload(user: User, event: Event) -> str:
    """JSON text encoded into the booking QR code."""
    return json.dumps(
        {
            "user_name": f"{user.first_name} {user.last_name}",
            "event_name": event.name,
            "date_time": event.date_time.isoformat(),
            "location": event.location,
            "longitude": event.longitude,
            "latitude": event.latitude,
            "id": event.short_id,
        },
        ensure_ascii=False,
    )


def book_event(store: DocumentStore, user_id: str, event_id: str) -> BookingConfirmation:
    """Book `event_id` for `user_id`.

    Raises:
        NotFoundError: If the user or the event does not exist.
        ConflictError: If the user already booked this event.
    """
    user = get_user(store, user_id)
    event = get_event(store, event_id)

    booking = {
        "user": BookingUser(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            phone_number=user.phone_number,
            email=user.email,
        ).model_dump(mode="json"),
        "event": BookingEvent(
            event_id=event.id,
            name=event.name,
            date_time=event.date_time,
            location=event.location,
        ).model_dump(mode="json"),
        "created_at": datetime.now(ZoneInfo("UTC")).isoformat(),
    }
    doc = store.insert_unless(BOOKINGS, booking, _owned_by(user.id, event.id))
    if doc is None:
        raise ConflictError("Booking already exists")
    stored = Booking.model_validate(doc)
    logger.info("User %s booked event %s (booking %s)", user.id, event.id, stored.id)
    return BookingConfirmation(booking=stored, qr_payload=build_qr_payload(user, event))


def list_bookings(store: DocumentStore) -> list[Booking]:
    return [Booking.model_validate(d) for d in store.find(BOOKINGS)]


def list_user_bookings(store: DocumentStore, user_id: str) -> list[Booking]:
    return [Booking.model_validate(d) for d in store.find(BOOKINGS, _owned_by(user_id))]


def cancel_booking(store: DocumentStore, user_id: str, event_id: str) -> Booking:
    doc = store.find_one(BOOKINGS, _owned_by(user_id, event_id))
    if doc is None:
        raise NotFoundError("Booking not found")
    store.delete(BOOKINGS, doc["id"])
    logger.info("User %s cancelled booking %s", user_id, doc["id"])
    return Booking.model_validate(doc)


def bookings_between(
    store: DocumentStore, from_date: datetime, to_date: datetime, *, timezone: str
) -> list[Booking]:
    """Bookings whose event starts within `[from_date, to_date]`."""
    start = ensure_tz(from_date, timezone)
    end = ensure_tz(to_date, timezone)
    if end < start:
        raise ValidationError("to_date must not be before from_date")
    bookings = list_bookings(store)
    return [b for b in bookings if start <= b.event.date_time <= end]


def render_bookings_csv(bookings: list[Booking]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([title for _, title in CSV_COLUMNS])
    for b in bookings:
        writer.writerow(
            [
                b.id,
                b.user.first_name,
                b.user.last_name,
                b.user.phone_number,
                b.user.email,
                b.event.name,
                b.event.date_time.isoformat(),
                b.event.location,
            ]
        )
    return buf.getvalue()


def export_bookings_csv(
    store: DocumentStore, from_date: datetime, to_date: datetime, *, out_dir: Path, timezone: str
) -> tuple[Path, int]:
    """Write the bookings export to `out_dir` and return `(path, row_count)`."""
    bookings = bookings_between(store, from_date, to_date, timezone=timezone)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"bookings{from_date.date().isoformat()}to{to_date.date().isoformat()}.csv"
    path.write_text(render_bookings_csv(bookings), encoding="utf-8", newline="")
    logger.info("Exported %d bookings to %s", len(bookings), path)
    return path, len(bookings)


def get_user_booking(store: DocumentStore, user_id: str, booking_id: str) -> Booking:
    doc = store.get(BOOKINGS, booking_id)
    if doc is None or doc["user"]["user_id"] != user_id:
        raise NotFoundError("Booking not found")
    return Booking.model_validate(doc)


def render_ticket(booking: Booking) -> str:
    lines = [
        f"Booking Ticket - {booking.id}",
        "",
        f"Name: {booking.user.first_name} {booking.user.last_name}",
        f"Email: {booking.user.email}",
        f"Phone: {booking.user.phone_number}",
        f"Event: {booking.event.name}",
        f"Date: {booking.event.date_time.isoformat()}",
        f"Location: {booking.event.location}",
    ]
    return "\n".join(lines) + "\n"
