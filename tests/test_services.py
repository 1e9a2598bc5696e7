"""Tests for the user, service and booking services on top of a real store."""
from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from slot_booking_api.app.core.security import decode_access_token, verify_password
from slot_booking_api.app.schemas.booking import BookingCreate
from slot_booking_api.app.schemas.service import ServiceCreate, ServiceUpdate
from slot_booking_api.app.schemas.user import UserCreate
from slot_booking_api.app.services.booking_service import BookingService
from slot_booking_api.app.services.errors import Conflict, RecordNotFound

SLOT_A = "2026-11-02 09:00"
SLOT_B = "2026-11-02 10:00"


def _user(email: str) -> UserCreate:
    return UserCreate(email=email, password="secret123", first_name="Test", last_name="User")


async def _room(service_service, name: str = "Room A", slots=(SLOT_A, SLOT_B)):
    return await service_service.create_service(ServiceCreate(name=name, type="room", slots=list(slots)))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_first_user_is_admin_then_users(user_service):
    first = await user_service.register(_user("Boss@Example.com"))
    second = await user_service.register(_user("member@example.com"))
    assert first.role == "admin"
    assert first.email == "boss@example.com"
    assert second.role == "user"


@pytest.mark.asyncio
async def test_password_is_hashed_and_never_returned(user_service, store):
    user = await user_service.register(_user("a@example.com"))
    assert "password" not in user.model_dump()
    stored = await store.find_by_id("users", user.id)
    assert stored["password"] != "secret123"
    assert verify_password("secret123", stored["password"])


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(user_service):
    await user_service.register(_user("a@example.com"))
    with pytest.raises(Conflict):
        await user_service.register(_user("A@example.com"))


@pytest.mark.asyncio
async def test_login_issues_token(user_service, settings):
    created = await user_service.register(_user("a@example.com"))
    user, token = await user_service.login("a@example.com", "secret123")
    assert user.id == created.id
    payload = decode_access_token(token, settings)
    assert payload["sub"] == "a@example.com"
    assert payload["user_id"] == created.id
    assert payload["role"] == "admin"

    with pytest.raises(ValueError):
        await user_service.login("a@example.com", "wrong-password")
    with pytest.raises(ValueError):
        await user_service.login("nobody@example.com", "secret123")


@pytest.mark.asyncio
async def test_role_update_and_delete(user_service):
    await user_service.register(_user("admin@example.com"))
    member = await user_service.register(_user("member@example.com"))

    promoted = await user_service.update_role(member.id, "admin")
    assert promoted.role == "admin"
    assert promoted.updated_at is not None
    with pytest.raises(ValueError):
        await user_service.update_role(member.id, "root")
    with pytest.raises(RecordNotFound):
        await user_service.update_role(999, "user")

    await user_service.delete_user(member.id)
    with pytest.raises(RecordNotFound):
        await user_service.get_user(member.id)
    with pytest.raises(RecordNotFound):
        await user_service.delete_user(member.id)
    assert [u.email for u in await user_service.list_users()] == ["admin@example.com"]


@pytest.mark.asyncio
async def test_set_password(user_service):
    await user_service.register(_user("a@example.com"))
    await user_service.set_password("a@example.com", "brand-new-pass")
    assert await user_service.authenticate("a@example.com", "brand-new-pass") is not None
    assert await user_service.authenticate("a@example.com", "secret123") is None
    with pytest.raises(RecordNotFound):
        await user_service.set_password("ghost@example.com", "whatever")


# ---------------------------------------------------------------------------
# Services and slots
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_service_sorts_and_dedupes_slots(service_service):
    service = await _room(service_service, slots=(SLOT_B, SLOT_A, SLOT_B))
    assert service.id == 1
    assert service.slots == [SLOT_A, SLOT_B]
    assert service.description == ""


@pytest.mark.asyncio
async def test_create_service_rejects_bad_slot(service_service):
    with pytest.raises(ValueError):
        await _room(service_service, slots=("tomorrow morning",))


@pytest.mark.asyncio
async def test_update_service_only_changes_given_fields(service_service):
    service = await _room(service_service)
    updated = await service_service.update_service(service.id, ServiceUpdate(description="Second floor"))
    assert updated.name == "Room A"
    assert updated.description == "Second floor"
    assert updated.slots == service.slots
    with pytest.raises(RecordNotFound):
        await service_service.update_service(999, ServiceUpdate(name="x"))


@pytest.mark.asyncio
async def test_slot_management(service_service):
    service = await _room(service_service, slots=(SLOT_B,))
    with_a = await service_service.add_slot(service.id, SLOT_A)
    assert with_a.slots == [SLOT_A, SLOT_B]
    with pytest.raises(Conflict):
        await service_service.add_slot(service.id, SLOT_A)
    with pytest.raises(ValueError):
        await service_service.add_slot(service.id, "2026/11/02 09:00")

    without_b = await service_service.remove_slot(service.id, SLOT_B)
    assert without_b.slots == [SLOT_A]
    with pytest.raises(RecordNotFound):
        await service_service.add_slot(999, SLOT_A)


@pytest.mark.asyncio
async def test_booked_slot_and_service_cannot_be_removed(service_service, booking_service):
    service = await _room(service_service)
    await booking_service.create_booking(1, BookingCreate(service_id=service.id, slot=SLOT_A))

    with pytest.raises(Conflict):
        await service_service.remove_slot(service.id, SLOT_A)
    with pytest.raises(Conflict):
        await service_service.delete_service(service.id)
    assert await service_service.available_slots(service.id) == [SLOT_B]


@pytest.mark.asyncio
async def test_delete_service(service_service):
    service = await _room(service_service)
    await service_service.delete_service(service.id)
    assert await service_service.list_services() == []
    with pytest.raises(RecordNotFound):
        await service_service.delete_service(service.id)


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_booking(service_service, booking_service):
    service = await _room(service_service)
    booking = await booking_service.create_booking(7, BookingCreate(service_id=service.id, slot=SLOT_A))
    assert booking.id == 1
    assert booking.user_id == 7
    assert booking.status == "confirmed"
    assert booking.created_at is not None


@pytest.mark.asyncio
async def test_booking_rules(service_service, booking_service):
    room = await _room(service_service)
    projector = await service_service.create_service(
        ServiceCreate(name="Projector", type="equipment", slots=[SLOT_A])
    )

    with pytest.raises(RecordNotFound):
        await booking_service.create_booking(1, BookingCreate(service_id=999, slot=SLOT_A))
    with pytest.raises(ValueError):
        await booking_service.create_booking(1, BookingCreate(service_id=room.id, slot="2026-12-24 18:00"))

    await booking_service.create_booking(1, BookingCreate(service_id=room.id, slot=SLOT_A))
    with pytest.raises(Conflict, match="already booked"):
        await booking_service.create_booking(2, BookingCreate(service_id=room.id, slot=SLOT_A))
    with pytest.raises(Conflict, match="already have a booking"):
        await booking_service.create_booking(1, BookingCreate(service_id=projector.id, slot=SLOT_A))

    # Another user may take the projector at the same time
    other = await booking_service.create_booking(2, BookingCreate(service_id=projector.id, slot=SLOT_A))
    assert other.service_id == projector.id


def test_racing_bookings_for_one_slot_admit_one(store, service_service):
    service = asyncio.run(_room(service_service))
    bookings = BookingService(store, service_service)

    def attempt(user_id: int) -> str:
        try:
            asyncio.run(bookings.create_booking(user_id, BookingCreate(service_id=service.id, slot=SLOT_A)))
        except Conflict:
            return "conflict"
        return "booked"

    with ThreadPoolExecutor(max_workers=6) as pool:
        outcomes = list(pool.map(attempt, range(1, 7)))

    assert outcomes.count("booked") == 1
    assert outcomes.count("conflict") == 5
    assert len(asyncio.run(store.read_collection("bookings"))) == 1


@pytest.mark.asyncio
async def test_listings_are_enriched(user_service, service_service, booking_service):
    admin = await user_service.register(_user("admin@example.com"))
    member = await user_service.register(_user("member@example.com"))
    room = await _room(service_service)
    await booking_service.create_booking(member.id, BookingCreate(service_id=room.id, slot=SLOT_A))
    await booking_service.create_booking(admin.id, BookingCreate(service_id=room.id, slot=SLOT_B))

    mine = await booking_service.list_user_bookings(member.id)
    assert [b.slot for b in mine] == [SLOT_A]
    assert mine[0].service.name == "Room A"
    assert mine[0].user is None

    everything = await booking_service.list_all_bookings()
    assert [b.user.email for b in everything] == ["member@example.com", "admin@example.com"]
    assert all(b.service.type == "room" for b in everything)

    per_service = await booking_service.list_service_bookings(room.id)
    assert len(per_service) == 2
    assert await booking_service.list_service_bookings(999) == []


@pytest.mark.asyncio
async def test_cancel_booking_permissions(service_service, booking_service):
    room = await _room(service_service)
    booking = await booking_service.create_booking(5, BookingCreate(service_id=room.id, slot=SLOT_A))

    with pytest.raises(PermissionError):
        await booking_service.cancel_booking(booking.id, user_id=6)
    await booking_service.cancel_booking(booking.id, user_id=5)
    with pytest.raises(RecordNotFound):
        await booking_service.get_booking(booking.id)

    other = await booking_service.create_booking(5, BookingCreate(service_id=room.id, slot=SLOT_A))
    await booking_service.cancel_booking(other.id, user_id=1, is_admin=True)
    with pytest.raises(RecordNotFound):
        await booking_service.cancel_booking(other.id, user_id=1, is_admin=True)


@pytest.mark.asyncio
async def test_update_status(service_service, booking_service):
    room = await _room(service_service)
    booking = await booking_service.create_booking(5, BookingCreate(service_id=room.id, slot=SLOT_A))
    completed = await booking_service.update_status(booking.id, "completed")
    assert completed.status == "completed"
    assert completed.created_at == booking.created_at
    assert completed.updated_at is not None
    with pytest.raises(ValueError):
        await booking_service.update_status(booking.id, "lost")
    with pytest.raises(RecordNotFound):
        await booking_service.update_status(999, "completed")
