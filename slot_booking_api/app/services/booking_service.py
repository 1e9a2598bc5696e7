"""
Business logic for bookings.

The ``BookingService`` creates, lists, cancels and re-labels bookings.
A slot of a service can be booked once, and a user cannot hold two
bookings at the same slot time across different services.

Both rules are checked and the booking inserted through
``JsonStore.create_if_absent``, i.e. inside a single lock scope.  Two
requests racing for the same slot therefore cannot both succeed: the
second one sees the first booking and is rejected with ``Conflict``.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.store import JsonStore
from ..schemas.booking import BookingCreate, BookingRead
from ..schemas.service import ServiceSummary
from ..schemas.user import UserSummary
from .errors import Conflict, RecordNotFound
from .service_service import ServiceService

logger = logging.getLogger(__name__)

BOOKINGS = "bookings"
SERVICES = "services"
USERS = "users"
BOOKING_STATUSES = ("confirmed", "cancelled", "completed")


def _service_summary(service: Optional[Dict[str, Any]]) -> Optional[ServiceSummary]:
    if service is None:
        return None
    return ServiceSummary(id=service["id"], name=service.get("name", ""), type=service.get("type", "other"))


def _user_summary(user: Optional[Dict[str, Any]]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(
        id=user["id"],
        email=user.get("email", ""),
        first_name=user.get("first_name"),
        last_name=user.get("last_name"),
    )


class BookingService:
    """Service for managing bookings."""

    def __init__(self, store: JsonStore, services: Optional[ServiceService] = None) -> None:
        self.store = store
        self.services = services or ServiceService(store)

    async def list_user_bookings(self, user_id: int) -> List[BookingRead]:
        """Bookings made by ``user_id``, each with a summary of its service."""
        bookings = await self.store.find_many(BOOKINGS, lambda b: b.get("user_id") == user_id)
        services = {s["id"]: s for s in await self.store.read_collection(SERVICES)}
        return [
            BookingRead.model_validate({**b, "service": _service_summary(services.get(b.get("service_id")))})
            for b in bookings
        ]

    async def list_all_bookings(self) -> List[BookingRead]:
        """Every booking, enriched with service and user summaries."""
        bookings = await self.store.read_collection(BOOKINGS)
        services = {s["id"]: s for s in await self.store.read_collection(SERVICES)}
        users = {u["id"]: u for u in await self.store.read_collection(USERS)}
        return [
            BookingRead.model_validate(
                {
                    **b,
                    "service": _service_summary(services.get(b.get("service_id"))),
                    "user": _user_summary(users.get(b.get("user_id"))),
                }
            )
            for b in bookings
        ]

    async def list_service_bookings(self, service_id: int) -> List[BookingRead]:
        bookings = await self.store.find_many(BOOKINGS, lambda b: b.get("service_id") == service_id)
        return [BookingRead.model_validate(b) for b in bookings]

    async def get_booking(self, booking_id: int) -> BookingRead:
        booking = await self.store.find_by_id(BOOKINGS, booking_id)
        if booking is None:
            raise RecordNotFound(f"Booking {booking_id} not found")
        return BookingRead.model_validate(booking)

    async def create_booking(self, user_id: int, data: BookingCreate) -> BookingRead:
        """Book ``data.slot`` of service ``data.service_id`` for ``user_id``.

        Raises ``RecordNotFound`` if the service does not exist,
        ``ValueError`` if the slot is not offered by the service and
        ``Conflict`` if the slot is taken or the user already has a
        booking at that time.
        """
        service_id = data.service_id
        slot = data.slot
        service = await self.services.get_service(service_id)
        if slot not in service.slots:
            raise ValueError(f"Slot {slot} does not exist for this service")

        def clashes(booking: Dict[str, Any]) -> bool:
            return booking.get("slot") == slot and (
                booking.get("service_id") == service_id or booking.get("user_id") == user_id
            )

        record, created = await self.store.create_if_absent(
            BOOKINGS,
            clashes,
            {"user_id": user_id, "service_id": service_id, "slot": slot, "status": "confirmed"},
        )
        if not created:
            if record.get("service_id") == service_id:
                raise Conflict(f"Slot {slot} is already booked")
            raise Conflict(f"You already have a booking at {slot}")
        logger.info("User %s booked service %s at %s (booking %s)", user_id, service_id, slot, record["id"])
        return BookingRead.model_validate(record)

    async def cancel_booking(self, booking_id: int, user_id: int, is_admin: bool = False) -> None:
        """Delete a booking.  Users may cancel their own bookings, admins any booking."""
        booking = await self.get_booking(booking_id)
        if not is_admin and booking.user_id != user_id:
            raise PermissionError("You are not allowed to cancel this booking")
        if not await self.store.delete_record(BOOKINGS, booking_id):
            raise RecordNotFound(f"Booking {booking_id} not found")
        logger.info("Booking %s cancelled by user %s", booking_id, user_id)

    async def update_status(self, booking_id: int, status: str) -> BookingRead:
        if status not in BOOKING_STATUSES:
            raise ValueError(f"Invalid booking status {status!r}")
        updated = await self.store.update_record(BOOKINGS, booking_id, {"status": status})
        if updated is None:
            raise RecordNotFound(f"Booking {booking_id} not found")
        return BookingRead.model_validate(updated)
