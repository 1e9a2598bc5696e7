"""Shared fixtures: every test gets its own store file under tmp_path."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from slot_booking_api.app.core.config import Settings
from slot_booking_api.app.core.store import JsonStore
from slot_booking_api.app.main import create_app
from slot_booking_api.app.services.booking_service import BookingService
from slot_booking_api.app.services.service_service import ServiceService
from slot_booking_api.app.services.user_service import UserService

# Short timings keep contention tests fast
POLL_INTERVAL = 0.01
TIMEOUT = 2.0


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture
def store(store_path) -> JsonStore:
    return JsonStore(store_path, poll_interval=POLL_INTERVAL, timeout=TIMEOUT)


@pytest.fixture
def settings(store_path) -> Settings:
    return Settings(
        data_path=str(store_path),
        secret_key="test-secret",
        lock_poll_interval_ms=10,
        lock_timeout_ms=2000,
    )


@pytest.fixture
def user_service(store, settings) -> UserService:
    return UserService(store, settings)


@pytest.fixture
def service_service(store) -> ServiceService:
    return ServiceService(store)


@pytest.fixture
def booking_service(store, service_service) -> BookingService:
    return BookingService(store, service_service)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
