"""End-to-end tests for the HTTP API through FastAPI's TestClient."""
from __future__ import annotations

import pytest

from slot_booking_api.app.core.exceptions import LockTimeout, StoreUnreadable

API = "/api/v1"
SLOT_A = "2026-11-02 09:00"
SLOT_B = "2026-11-02 10:00"


def _register(client, email: str, password: str = "secret123") -> dict:
    resp = client.post(
        f"{API}/auth/register",
        json={"email": email, "password": password, "first_name": "Test", "last_name": "User"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _login(client, email: str, password: str = "secret123") -> dict:
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def admin_headers(client) -> dict:
    _register(client, "admin@example.com")
    return _login(client, "admin@example.com")


@pytest.fixture
def member_headers(client, admin_headers) -> dict:
    _register(client, "member@example.com")
    return _login(client, "member@example.com")


@pytest.fixture
def room(client, admin_headers) -> dict:
    resp = client.post(
        f"{API}/services/",
        json={"name": "Room A", "type": "room", "slots": [SLOT_B, SLOT_A]},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get(f"{API}/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "OK"
    assert resp.json()["store"] == {"initialized": True, "locked": False}


def test_startup_initializes_store(client, store_path):
    assert store_path.exists()


def test_register_login_profile(client):
    user = _register(client, "Admin@Example.com")
    assert user["email"] == "admin@example.com"
    assert user["role"] == "admin"
    assert "password" not in user
    assert "createdAt" in user

    assert client.post(
        f"{API}/auth/register",
        json={"email": "admin@example.com", "password": "secret123", "first_name": "A", "last_name": "B"},
    ).status_code == 409

    headers = _login(client, "admin@example.com")
    profile = client.get(f"{API}/auth/profile", headers=headers)
    assert profile.status_code == 200
    assert profile.json()["id"] == user["id"]


def test_register_validation(client):
    resp = client.post(
        f"{API}/auth/register",
        json={"email": "not-an-email", "password": "123", "first_name": "", "last_name": "B"},
    )
    assert resp.status_code == 422


def test_bad_credentials_and_tokens(client, admin_headers):
    assert client.post(
        f"{API}/auth/login", json={"email": "admin@example.com", "password": "nope"}
    ).status_code == 401
    assert client.get(f"{API}/auth/profile").status_code == 401
    assert client.get(
        f"{API}/auth/profile", headers={"Authorization": "Bearer garbage"}
    ).status_code == 401


def test_user_admin_routes(client, admin_headers, member_headers):
    assert client.get(f"{API}/users/", headers=member_headers).status_code == 403

    users = client.get(f"{API}/users/", headers=admin_headers).json()
    member = next(u for u in users if u["email"] == "member@example.com")

    resp = client.patch(f"{API}/users/{member['id']}/role", json={"role": "admin"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"
    assert client.patch(
        f"{API}/users/{member['id']}/role", json={"role": "root"}, headers=admin_headers
    ).status_code == 422

    assert client.delete(f"{API}/users/{member['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/users/{member['id']}", headers=admin_headers).status_code == 404
    # A deleted user's token no longer works
    assert client.get(f"{API}/auth/profile", headers=member_headers).status_code == 401


def test_service_routes(client, admin_headers, member_headers, room):
    assert room["slots"] == [SLOT_A, SLOT_B]
    assert client.get(f"{API}/services/").json()[0]["name"] == "Room A"
    assert client.get(f"{API}/services/{room['id']}").status_code == 200
    assert client.get(f"{API}/services/999").status_code == 404

    assert client.post(
        f"{API}/services/", json={"name": "X", "type": "room"}, headers=member_headers
    ).status_code == 403
    assert client.post(
        f"{API}/services/", json={"name": "X", "type": "spaceship"}, headers=admin_headers
    ).status_code == 422

    resp = client.patch(f"{API}/services/{room['id']}", json={"name": "Room B"}, headers=admin_headers)
    assert resp.json()["name"] == "Room B"
    assert "updatedAt" in resp.json()

    slot_c = "2026-11-02 11:00"
    resp = client.post(f"{API}/services/{room['id']}/slots", json={"slot": slot_c}, headers=admin_headers)
    assert resp.json()["slots"] == [SLOT_A, SLOT_B, slot_c]
    assert client.post(
        f"{API}/services/{room['id']}/slots", json={"slot": slot_c}, headers=admin_headers
    ).status_code == 409
    assert client.post(
        f"{API}/services/{room['id']}/slots", json={"slot": "11am"}, headers=admin_headers
    ).status_code == 422

    resp = client.request(
        "DELETE", f"{API}/services/{room['id']}/slots", json={"slot": slot_c}, headers=admin_headers
    )
    assert resp.json()["slots"] == [SLOT_A, SLOT_B]


def test_booking_flow(client, admin_headers, member_headers, room):
    resp = client.post(f"{API}/bookings/", json={"service_id": room["id"], "slot": SLOT_A}, headers=member_headers)
    assert resp.status_code == 201, resp.text
    booking = resp.json()
    assert booking["status"] == "confirmed"

    assert client.get(f"{API}/services/{room['id']}/slots/available").json() == [SLOT_B]

    taken = client.post(f"{API}/bookings/", json={"service_id": room["id"], "slot": SLOT_A}, headers=admin_headers)
    assert taken.status_code == 409
    assert client.post(
        f"{API}/bookings/", json={"service_id": 999, "slot": SLOT_A}, headers=member_headers
    ).status_code == 404
    assert client.post(
        f"{API}/bookings/", json={"service_id": room["id"], "slot": "2026-12-31 23:00"}, headers=member_headers
    ).status_code == 400

    mine = client.get(f"{API}/bookings/my-bookings", headers=member_headers).json()
    assert [b["id"] for b in mine] == [booking["id"]]
    assert mine[0]["service"]["name"] == "Room A"

    assert client.get(f"{API}/bookings/", headers=member_headers).status_code == 403
    assert len(client.get(f"{API}/bookings/?service_id={room['id']}", headers=member_headers).json()) == 1
    agenda = client.get(f"{API}/bookings/?service_id={room['id']}")
    assert agenda.status_code == 200
    assert [b["slot"] for b in agenda.json()] == [SLOT_A]
    assert client.get(f"{API}/bookings/").status_code == 401
    everything = client.get(f"{API}/bookings/", headers=admin_headers).json()
    assert everything[0]["user"]["email"] == "member@example.com"

    assert client.get(f"{API}/bookings/{booking['id']}", headers=member_headers).status_code == 200
    assert client.delete(f"{API}/services/{room['id']}", headers=admin_headers).status_code == 409

    resp = client.patch(
        f"{API}/bookings/{booking['id']}/status", json={"status": "completed"}, headers=admin_headers
    )
    assert resp.json()["status"] == "completed"
    assert client.patch(
        f"{API}/bookings/{booking['id']}/status", json={"status": "completed"}, headers=member_headers
    ).status_code == 403

    assert client.delete(f"{API}/bookings/{booking['id']}", headers=member_headers).status_code == 204
    assert client.get(f"{API}/bookings/{booking['id']}", headers=member_headers).status_code == 404


def test_booking_visibility_and_cancellation_rights(client, admin_headers, member_headers, room):
    booking = client.post(
        f"{API}/bookings/", json={"service_id": room["id"], "slot": SLOT_B}, headers=admin_headers
    ).json()
    assert client.get(f"{API}/bookings/{booking['id']}", headers=member_headers).status_code == 403
    assert client.delete(f"{API}/bookings/{booking['id']}", headers=member_headers).status_code == 403
    assert client.delete(f"{API}/bookings/{booking['id']}", headers=admin_headers).status_code == 204


def test_store_failures_map_to_http_errors(client, monkeypatch):
    store = client.app.state.store

    async def busy(name):
        raise LockTimeout("busy", store.lock.path)

    monkeypatch.setattr(store, "read_collection", busy)
    resp = client.get(f"{API}/services/")
    assert resp.status_code == 503
    assert "detail" in resp.json()

    async def broken(name):
        raise StoreUnreadable("broken", store.path)

    monkeypatch.setattr(store, "read_collection", broken)
    resp = client.get(f"{API}/services/")
    assert resp.status_code == 500
