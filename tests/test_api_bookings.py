import csv
import io
import json


def _create_event(client, admin_headers, event_payload, **overrides) -> dict:
    resp = client.post("/api/events", headers=admin_headers, json=event_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()["event"]


def test_book_event_returns_booking_and_qr_payload(client, user_headers, admin_headers, event_payload):
    event = _create_event(client, admin_headers, event_payload)

    resp = client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Booking Successfully"
    assert body["booking"]["user"]["email"] == "ada@eventbook.io"
    assert body["booking"]["event"]["event_id"] == event["id"]

    qr = json.loads(body["qr_payload"])
    assert qr["id"] == event["short_id"]
    assert qr["user_name"] == "Ada Lovelace"
    assert qr["event_name"] == "Jazz Night"
    assert (qr["latitude"], qr["longitude"]) == (20.0, 30.0)


def test_booking_twice_conflicts(client, user_headers, admin_headers, event_payload):
    event = _create_event(client, admin_headers, event_payload)
    assert client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]}).status_code == 201

    resp = client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]})
    assert resp.status_code == 409
    assert resp.json()["detail"]["message"] == "Booking already exists"


def test_booking_unknown_event(client, user_headers):
    resp = client.post("/api/bookings", headers=user_headers, json={"event_id": "missing"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Event not found"


def test_list_and_cancel_own_bookings(client, user_headers, admin_headers, event_payload):
    first = _create_event(client, admin_headers, event_payload)
    second = _create_event(client, admin_headers, event_payload, name="Blues Evening")
    client.post("/api/bookings", headers=user_headers, json={"event_id": first["id"]})
    client.post("/api/bookings", headers=user_headers, json={"event_id": second["id"]})
    # The admin's own booking must not show up in Ada's list.
    client.post("/api/bookings", headers=admin_headers, json={"event_id": first["id"]})

    mine = client.get("/api/bookings/me", headers=user_headers).json()
    assert mine["count"] == 2

    resp = client.delete("/api/bookings", headers=user_headers, params={"event_id": first["id"]})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Booking cancel successfully"
    assert client.get("/api/bookings/me", headers=user_headers).json()["count"] == 1

    again = client.delete("/api/bookings", headers=user_headers, params={"event_id": first["id"]})
    assert again.status_code == 404
    assert again.json()["detail"]["message"] == "Booking not found"


def test_ticket_is_only_served_to_its_owner(client, user_headers, admin_headers, event_payload):
    event = _create_event(client, admin_headers, event_payload)
    booking = client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]}).json()["booking"]

    resp = client.get(f"/api/bookings/{booking['id']}/ticket", headers=user_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert f"{booking['id']}.txt" in resp.headers["content-disposition"]
    assert "Name: Ada Lovelace" in resp.text
    assert "Location: Central Park" in resp.text

    other = client.get(f"/api/bookings/{booking['id']}/ticket", headers=admin_headers)
    assert other.status_code == 404


def test_admin_sees_all_bookings(client, user_headers, admin_headers, event_payload):
    event = _create_event(client, admin_headers, event_payload)
    client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]})
    client.post("/api/bookings", headers=admin_headers, json={"event_id": event["id"]})

    assert client.get("/api/bookings", headers=user_headers).status_code == 403
    resp = client.get("/api/bookings", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["count"] == 2


def test_export_csv_filters_by_event_date(client, user_headers, admin_headers, event_payload):
    may = _create_event(client, admin_headers, event_payload)
    july = _create_event(client, admin_headers, event_payload, name="Summer Gala", date_time="2023-07-14T20:00:00Z")
    client.post("/api/bookings", headers=user_headers, json={"event_id": may["id"]})
    client.post("/api/bookings", headers=user_headers, json={"event_id": july["id"]})

    params = {"from_date": "2023-05-01T00:00:00Z", "to_date": "2023-05-31T23:59:59Z"}
    assert client.get("/api/bookings/export.csv", headers=user_headers, params=params).status_code == 403

    resp = client.get("/api/bookings/export.csv", headers=admin_headers, params=params)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "bookings2023-05-01to2023-05-31.csv" in resp.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0][0] == "Booking ID"
    assert len(rows) == 2
    assert rows[1][5] == "Jazz Night"


def test_export_csv_outside_range_has_only_header(client, admin_headers, user_headers, event_payload):
    event = _create_event(client, admin_headers, event_payload)
    client.post("/api/bookings", headers=user_headers, json={"event_id": event["id"]})

    params = {"from_date": "2024-01-01T00:00:00Z", "to_date": "2024-12-31T00:00:00Z"}
    resp = client.get("/api/bookings/export.csv", headers=admin_headers, params=params)
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert len(rows) == 1


def test_export_csv_rejects_inverted_range(client, admin_headers):
    params = {"from_date": "2023-06-01T00:00:00Z", "to_date": "2023-05-01T00:00:00Z"}
    resp = client.get("/api/bookings/export.csv", headers=admin_headers, params=params)
    assert resp.status_code == 400
