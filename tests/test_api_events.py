from starlette.testclient import TestClient

from eventbook.api.app import create_app
from eventbook.domain.models import RegisterRequest
from eventbook.services.users import register_user
from eventbook.storage.documents import DocumentStore


def _create(client, headers, payload) -> dict:
    resp = client.post("/api/events", headers=headers, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["event"]


def test_event_routes_require_authentication(client):
    resp = client.get("/api/events")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "AUTHENTICATION_FAILED"


def test_only_admins_manage_events(client, user_headers, event_payload):
    resp = client.post("/api/events", headers=user_headers, json=event_payload())
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_AUTHORIZED"


def test_create_get_and_list_events(client, admin_headers, user_headers, event_payload):
    later = _create(client, admin_headers, event_payload(name="Late Show", date_time="2023-06-01T21:00:00Z"))
    early = _create(client, admin_headers, event_payload())

    assert len(early["short_id"]) == 10
    int(early["short_id"], 16)
    assert early["id"] != early["short_id"]

    resp = client.get(f"/api/events/{early['id']}", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["event"]["name"] == "Jazz Night"

    listed = client.get("/api/events", headers=user_headers).json()["events"]
    assert [e["id"] for e in listed] == [early["id"], later["id"]]


def test_create_event_validates_payload(client, admin_headers, event_payload):
    payload = event_payload()
    del payload["latitude"]
    resp = client.post("/api/events", headers=admin_headers, json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_patch_and_delete_event(client, admin_headers, event_payload):
    event = _create(client, admin_headers, event_payload())

    resp = client.patch(f"/api/events/{event['id']}", headers=admin_headers, json={"location": "Riverside Stage"})
    assert resp.status_code == 200
    patched = resp.json()["event"]
    assert patched["location"] == "Riverside Stage"
    assert patched["name"] == event["name"]
    assert patched["short_id"] == event["short_id"]

    assert client.patch("/api/events/missing", headers=admin_headers, json={"name": "Nothing"}).status_code == 404

    assert client.delete(f"/api/events/{event['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/events/{event['id']}", headers=admin_headers).status_code == 404


def test_nearby_events_include_distance(client, admin_headers, user_headers, event_payload):
    center = _create(client, admin_headers, event_payload())
    _create(client, admin_headers, event_payload(name="Far Away Fest", latitude=45.0, longitude=45.0))

    resp = client.get(
        "/api/events/nearby", headers=user_headers, params={"latitude": 20.0, "longitude": 30.0, "radius": 20}
    )
    assert resp.status_code == 200
    events = resp.json()["events"]
    assert [e["id"] for e in events] == [center["id"]]
    assert events[0]["distance_km"] == 0.0


def test_nearby_events_not_found(client, admin_headers, user_headers, event_payload):
    _create(client, admin_headers, event_payload())

    resp = client.get(
        "/api/events/nearby", headers=user_headers, params={"latitude": 5.0, "longitude": 6.0, "radius": 1}
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == {"code": "NOT_FOUND", "message": "Events not found"}


def _recurring(**overrides) -> dict:
    data = {
        "name": "Morning Yoga",
        "description": "Sunrise yoga by the lake.",
        "location": "Lakeside Deck",
        "latitude": 20.0,
        "longitude": 30.0,
        "start_date": "2023-05-01",
        "end_date": "2023-05-10",
        "recurrence_type": "weekly",
        "frequency": [3],
    }
    data.update(overrides)
    return data


def test_recurring_weekly_events(client, admin_headers):
    resp = client.post("/api/events/recurring", headers=admin_headers, json=_recurring())
    assert resp.status_code == 201
    events = resp.json()["events"]
    assert [e["date_time"][:10] for e in events] == ["2023-05-03", "2023-05-10"]
    assert len({e["short_id"] for e in events}) == 2


def test_recurring_accepts_scalar_frequency_and_start_time(client, admin_headers):
    resp = client.post(
        "/api/events/recurring",
        headers=admin_headers,
        json=_recurring(recurrence_type="monthly", frequency="31", start_date="2023-04-01", end_date="2023-05-31",
                        start_time="18:30:00"),
    )
    assert resp.status_code == 201
    events = resp.json()["events"]
    assert len(events) == 1
    assert events[0]["date_time"].startswith("2023-05-31T18:30:00")


def test_recurring_daily_keeps_duplicates_by_default(client, admin_headers):
    resp = client.post(
        "/api/events/recurring",
        headers=admin_headers,
        json=_recurring(recurrence_type="daily", frequency=[1, 2], end_date="2023-05-03"),
    )
    assert resp.status_code == 201
    assert resp.json()["count"] == 6


def test_recurring_daily_dedupe_setting(settings, event_payload):
    deduping = settings.model_copy(update={"scheduling": settings.scheduling.model_copy(update={"dedupe_dates": True})})
    store = DocumentStore(None)
    register_user(
        store,
        RegisterRequest(
            first_name="Grace",
            last_name="Hopper",
            email="grace@eventbook.io",
            phone_number="0987654321",
            date_of_birth="1990-01-01",
            address="12 Analytical Row",
            password="secret123",
        ),
        deduping.auth,
        is_admin=True,
    )
    with TestClient(create_app(deduping, store=store)) as c:
        token = c.post("/api/users/login", json={"email": "grace@eventbook.io", "password": "secret123"}).json()["token"]
        resp = c.post(
            "/api/events/recurring",
            headers={"Authorization": f"Bearer {token}"},
            json=_recurring(recurrence_type="daily", frequency=[1, 2], end_date="2023-05-03"),
        )
    assert resp.status_code == 201
    assert [e["date_time"][:10] for e in resp.json()["events"]] == ["2023-05-01", "2023-05-02", "2023-05-03"]


def test_recurring_with_inverted_range_creates_nothing(client, admin_headers):
    resp = client.post(
        "/api/events/recurring",
        headers=admin_headers,
        json=_recurring(start_date="2023-05-10", end_date="2023-05-01"),
    )
    assert resp.status_code == 201
    assert resp.json() == {"count": 0, "events": []}


def test_recurring_rejects_bad_input(client, admin_headers):
    bad_frequency = client.post("/api/events/recurring", headers=admin_headers, json=_recurring(frequency="wed"))
    bad_type = client.post("/api/events/recurring", headers=admin_headers, json=_recurring(recurrence_type="yearly"))
    assert bad_frequency.status_code == 400
    assert bad_type.status_code == 400


def test_nearby_with_negative_radius_finds_nothing(client, admin_headers, user_headers, event_payload):
    _create(client, admin_headers, event_payload())

    resp = client.get(
        "/api/events/nearby", headers=user_headers, params={"latitude": 20.0, "longitude": 30.0, "radius": -1}
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Events not found"
