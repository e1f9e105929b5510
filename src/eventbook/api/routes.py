"""
Event API routes.

Endpoints:
- GET    `/api/health`: liveness probe.
- GET    `/api/events`: all events, soonest first.
- GET    `/api/events/nearby`: events inside a +/- radius degree box, with distances.
- GET    `/api/events/{event_id}`: one event.
- POST   `/api/events` (admin): create an event.
- POST   `/api/events/recurring` (admin): create one event per recurrence date.
- PATCH  `/api/events/{event_id}` (admin): partial update.
- DELETE `/api/events/{event_id}` (admin): delete.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from eventbook.api.deps import get_app_settings, get_principal, get_store, require_admin
from eventbook.config.settings import Settings
from eventbook.core.security import Principal
from eventbook.domain.models import EventCreate, EventPatch, RecurringEventCreate
from eventbook.services import events as event_service
from eventbook.storage.documents import DocumentStore

router = APIRouter()


@router.get("/api/health")
def get_health(settings: Settings = Depends(get_app_settings)) -> dict:
    return {"status": "ok", "app": settings.app.name}


@router.get("/api/events")
def get_all_events(
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(get_principal),
) -> dict:
    events = event_service.list_events(store)
    return {"count": len(events), "events": [e.model_dump(mode="json") for e in events]}


@router.get("/api/events/nearby")
def get_nearby_events(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(...),
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(get_principal),
) -> dict:
    """Return events in the degree box around the point, each with `distance_km`."""
    events = event_service.find_nearby_events(store, latitude=latitude, longitude=longitude, radius=radius)
    return {"count": len(events), "events": [e.model_dump(mode="json") for e in events]}


@router.get("/api/events/{event_id}")
def get_event(
    event_id: str,
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(get_principal),
) -> dict:
    return {"event": event_service.get_event(store, event_id).model_dump(mode="json")}


@router.post("/api/events", status_code=status.HTTP_201_CREATED)
def post_event(
    payload: EventCreate,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    _: Principal = Depends(require_admin),
) -> dict:
    event = event_service.create_event(store, payload, timezone=settings.app.timezone)
    return {"event": event.model_dump(mode="json")}


@router.post("/api/events/recurring", status_code=status.HTTP_201_CREATED)
def post_recurring_events(
    payload: RecurringEventCreate,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    _: Principal = Depends(require_admin),
) -> dict:
    """Expand the recurrence and store every generated event (all or nothing)."""
    events = event_service.create_recurring_events(
        store,
        payload,
        timezone=settings.app.timezone,
        dedupe=settings.scheduling.dedupe_dates,
    )
    return {"count": len(events), "events": [e.model_dump(mode="json") for e in events]}


@router.patch("/api/events/{event_id}")
def patch_event(
    event_id: str,
    patch: EventPatch,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    _: Principal = Depends(require_admin),
) -> dict:
    event = event_service.update_event(store, event_id, patch, timezone=settings.app.timezone)
    return {"event": event.model_dump(mode="json")}


@router.delete("/api/events/{event_id}")
def delete_event(
    event_id: str,
    store: DocumentStore = Depends(get_store),
    _: Principal = Depends(require_admin),
) -> dict:
    return {"event": event_service.delete_event(store, event_id).model_dump(mode="json")}
