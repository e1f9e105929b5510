import pytest
from starlette.testclient import TestClient

from eventbook.api.app import create_app
from eventbook.config.settings import Settings
from eventbook.domain.models import RegisterRequest
from eventbook.services.users import register_user
from eventbook.storage.documents import DocumentStore


def _user_payload(**overrides) -> dict:
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@eventbook.io",
        "phone_number": "1234567890",
        "date_of_birth": "1990-01-01",
        "address": "12 Analytical Row",
        "password": "secret123",
    }
    data.update(overrides)
    return data


@pytest.fixture
def settings() -> Settings:
    # In-memory storage and a cheap bcrypt work factor keep the API tests fast and offline.
    return Settings.model_validate(
        {
            "app": {"timezone": "UTC"},
            "storage": {"enabled": False},
            "auth": {"jwt_secret": "test-secret-0123456789abcdef0123456789", "bcrypt_rounds": 4},
        }
    )


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore(None)


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings, store=store)) as c:
        yield c


@pytest.fixture
def user_payload():
    return _user_payload


@pytest.fixture
def login(client):
    def _login(email: str, password: str) -> dict:
        resp = client.post("/api/users/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
def user_headers(client, login):
    resp = client.post("/api/users/register", json=_user_payload())
    assert resp.status_code == 201, resp.text
    return login("ada@eventbook.io", "secret123")


@pytest.fixture
def admin_headers(store, settings, login):
    payload = RegisterRequest(
        **_user_payload(
            first_name="Grace",
            last_name="Hopper",
            email="grace@eventbook.io",
            phone_number="0987654321",
        )
    )
    register_user(store, payload, settings.auth, is_admin=True)
    return login("grace@eventbook.io", "secret123")


@pytest.fixture
def event_payload():
    def _event(**overrides) -> dict:
        data = {
            "name": "Jazz Night",
            "description": "Live jazz on the lawn.",
            "location": "Central Park",
            "latitude": 20.0,
            "longitude": 30.0,
            "date_time": "2023-05-03T19:00:00+00:00",
        }
        data.update(overrides)
        return data

    return _event
