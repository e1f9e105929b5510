"""
Event management: CRUD, geofenced lookup and recurring-event generation.

This module is the seam between the pure core (`eventbook.scheduling.recurrence`,
`eventbook.search.proximity`) and storage:
- nearby lookup loads stored events, runs the box filter + distance ranking
- recurring creation expands dates, then writes one event per date in a single
  all-or-nothing batch
"""

from __future__ import annotations

import logging

from eventbook.core.errors import NotFoundError
from eventbook.core.geo import GeoPoint
from eventbook.core.ids import generate_short_id
from eventbook.core.time import at_time_of_day, ensure_tz
from eventbook.domain.models import (
    Event,
    EventCreate,
    EventPatch,
    NearbyEvent,
    RecurringEventCreate,
)
from eventbook.scheduling.recurrence import RecurrenceRequest, expand
from eventbook.search.proximity import GeoQuery, search
from eventbook.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

EVENTS = "events"


def _event_point(event: Event) -> GeoPoint:
    return GeoPoint(lat=event.latitude, lon=event.longitude)


def _load_events(store: DocumentStore) -> list[Event]:
    return [Event.model_validate(d) for d in store.find(EVENTS)]


def create_event(store: DocumentStore, payload: EventCreate, *, timezone: str) -> Event:
    doc = payload.model_dump(mode="json")
    doc["date_time"] = ensure_tz(payload.date_time, timezone).isoformat()
    doc["short_id"] = generate_short_id()
    event = Event.model_validate(store.insert(EVENTS, doc))
    logger.info("Created event %s (%s)", event.id, event.short_id)
    return event


def get_event(store: DocumentStore, event_id: str) -> Event:
    doc = store.get(EVENTS, event_id)
    if doc is None:
        raise NotFoundError("Event not found")
    return Event.model_validate(doc)


def list_events(store: DocumentStore) -> list[Event]:
    """Return all events ordered by start time (ascending)."""
    return sorted(_load_events(store), key=lambda e: e.date_time)


def update_event(store: DocumentStore, event_id: str, patch: EventPatch, *, timezone: str) -> Event:
    event = get_event(store, event_id)
    doc = patch.merge_into(event.model_dump(mode="json"))
    if patch.date_time is not None:
        doc["date_time"] = ensure_tz(patch.date_time, timezone).isoformat()
    updated = Event.model_validate(doc)
    stored = store.replace(EVENTS, event_id, updated.model_dump(mode="json"))
    logger.info("Updated event %s", event_id)
    return Event.model_validate(stored)


def delete_event(store: DocumentStore, event_id: str) -> Event:
    doc = store.delete(EVENTS, event_id)
    if doc is None:
        raise NotFoundError("Event not found")
    logger.info("Deleted event %s", event_id)
    return Event.model_validate(doc)


def find_nearby_events(store: DocumentStore, *, latitude: float, longitude: float, radius: float) -> list[NearbyEvent]:
    """Events inside the +/- `radius` degree box, each with its distance in km.

    Raises:
        NotFoundError: If no stored event falls inside the box.
    """
    query = GeoQuery(center=GeoPoint(lat=float(latitude), lon=float(longitude)), radius=float(radius))
    ranked = search(query, _load_events(store), get_point=_event_point)
    return [NearbyEvent(**r.item.model_dump(), distance_km=r.distance_km) for r in ranked]


def create_recurring_events(
    store: DocumentStore,
    payload: RecurringEventCreate,
    *,
    timezone: str,
    dedupe: bool = False,
) -> list[Event]:
    """Create one event per expanded occurrence date.

    Either every generated event is stored or none is. An empty expansion
    (e.g. `start_date > end_date`) creates nothing and returns an empty list.
    """
    request = RecurrenceRequest(
        start_date=payload.start_date,
        end_date=payload.end_date,
        recurrence_type=payload.recurrence_type,
        frequency=tuple(payload.frequency),
    )
    dates = expand(request, dedupe=dedupe)

    base = payload.model_dump(mode="json", include={"name", "description", "location", "latitude", "longitude"})
    docs = []
    for day in dates:
        doc = dict(base)
        doc["date_time"] = at_time_of_day(day, payload.start_time, timezone).isoformat()
        doc["short_id"] = generate_short_id()
        docs.append(doc)

    stored = store.insert_many(EVENTS, docs) if docs else []
    logger.info(
        "Created %d recurring events (%s, frequency=%s, %s..%s)",
        len(stored),
        request.recurrence_type,
        list(request.frequency),
        request.start_date.isoformat(),
        request.end_date.isoformat(),
    )
    return [Event.model_validate(d) for d in stored]
