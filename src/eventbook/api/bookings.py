"""
Booking API routes.

Endpoints:
- POST   `/api/bookings`: book an event for the caller (returns the QR payload).
- GET    `/api/bookings/me`: the caller's bookings.
- DELETE `/api/bookings?event_id=...`: cancel the caller's booking for an event.
- GET    `/api/bookings/{booking_id}/ticket`: plain-text ticket for the caller's booking.
- GET    `/api/bookings` (admin): every booking.
- GET    `/api/bookings/export.csv` (admin): CSV of bookings whose event falls in a date range.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse, Response

from eventbook.api.deps import get_app_settings, get_principal, get_store, require_admin
from eventbook.config.settings import Settings
from eventbook.core.security import Principal
from eventbook.domain.models import BookingCreate
from eventbook.services import bookings as booking_service
from eventbook.storage.documents import DocumentStore

router = APIRouter()


@router.post("/api/bookings", status_code=status.HTTP_201_CREATED)
def book_event(
    payload: BookingCreate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> dict:
    confirmation = booking_service.book_event(store, principal.user_id, payload.event_id)
    return {"message": "Booking Successfully", **confirmation.model_dump(mode="json")}


@router.get("/api/bookings/me")
def get_user_bookings(
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> dict:
    bookings = booking_service.list_user_bookings(store, principal.user_id)
    return {"count": len(bookings), "bookings": [b.model_dump(mode="json") for b in bookings]}


@router.delete("/api/bookings")
def cancel_booking(
    event_id: str = Query(..., min_length=1),
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> dict:
    booking = booking_service.cancel_booking(store, principal.user_id, event_id)
    return {"message": "Booking cancel successfully", "booking": booking.model_dump(mode="json")}


@router.get("/api/bookings/export.csv")
def export_bookings_csv(
    from_date: datetime,
    to_date: datetime,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    _: Principal = Depends(require_admin),
) -> Response:
    bookings = booking_service.bookings_between(store, from_date, to_date, timezone=settings.app.timezone)
    filename = f"bookings{from_date.date().isoformat()}to{to_date.date().isoformat()}.csv"
    return Response(
        content=booking_service.render_bookings_csv(bookings),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/api/bookings/{booking_id}/ticket")
def get_ticket(
    booking_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_principal),
) -> PlainTextResponse:
    booking = booking_service.get_user_booking(store, principal.user_id, booking_id)
    return PlainTextResponse(
        booking_service.render_ticket(booking),
        headers={"Content-Disposition": f"attachment; filename={booking.id}.txt"},
    )


@router.get("/api/bookings")
def get_all_bookings(
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(require_admin),
) -> dict:
    bookings = booking_service.list_bookings(store)
    return {"count": len(bookings), "bookings": [b.model_dump(mode="json") for b in bookings]}
