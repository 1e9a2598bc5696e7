"""
Business logic for bookable services and their slots.

Services carry their own list of slots (``YYYY-MM-DD HH:MM`` strings,
kept sorted).  A slot is available when no booking references it.
Services and slots that are still referenced by bookings cannot be
removed.
"""

import logging
import re
from typing import Any, Dict, List

from ..core.store import JsonStore
from ..schemas.service import ServiceCreate, ServiceRead, ServiceUpdate
from .errors import Conflict, RecordNotFound

SERVICES = "services"
BOOKINGS = "bookings"
SERVICE_TYPES = ("room", "equipment", "other")
SLOT_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$")


def validate_slot(slot: str) -> str:
    if not isinstance(slot, str) or not SLOT_RE.match(slot):
        raise ValueError("Invalid slot format, expected YYYY-MM-DD HH:MM")
    return slot


class ServiceService:
    """Service for managing bookable services."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    async def list_services(self) -> List[ServiceRead]:
        return [ServiceRead.model_validate(s) for s in await self.store.read_collection(SERVICES)]

    async def get_service(self, service_id: int) -> ServiceRead:
        service = await self.store.find_by_id(SERVICES, service_id)
        if service is None:
            raise RecordNotFound(f"Service {service_id} not found")
        return ServiceRead.model_validate(service)

    async def create_service(self, data: ServiceCreate) -> ServiceRead:
        """Create a service.  Supplied slots are validated, de-duplicated and sorted."""
        if data.type not in SERVICE_TYPES:
            raise ValueError(f"Invalid service type {data.type!r}")
        slots = sorted({validate_slot(s) for s in data.slots})
        record = await self.store.create_record(
            SERVICES,
            {
                "name": data.name,
                "type": data.type,
                "description": data.description or "",
                "slots": slots,
            },
        )
        logging.getLogger(__name__).info("Created service %s (%s)", record["id"], data.name)
        return ServiceRead.model_validate(record)

    async def update_service(self, service_id: int, data: ServiceUpdate) -> ServiceRead:
        patch: Dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if "type" in patch and patch["type"] not in SERVICE_TYPES:
            raise ValueError(f"Invalid service type {patch['type']!r}")
        updated = await self.store.update_record(SERVICES, service_id, patch)
        if updated is None:
            raise RecordNotFound(f"Service {service_id} not found")
        return ServiceRead.model_validate(updated)

    async def delete_service(self, service_id: int) -> None:
        """Delete a service that no booking refers to."""
        bookings = await self.store.find_many(BOOKINGS, lambda b: b.get("service_id") == service_id)
        if bookings:
            raise Conflict("Cannot delete a service that still has bookings")
        if not await self.store.delete_record(SERVICES, service_id):
            raise RecordNotFound(f"Service {service_id} not found")
        logging.getLogger(__name__).info("Deleted service %s", service_id)

    async def add_slot(self, service_id: int, slot: str) -> ServiceRead:
        validate_slot(slot)
        service = await self.get_service(service_id)
        if slot in service.slots:
            raise Conflict(f"Slot {slot} already exists for this service")
        updated = await self.store.update_record(SERVICES, service_id, {"slots": sorted([*service.slots, slot])})
        if updated is None:
            raise RecordNotFound(f"Service {service_id} not found")
        return ServiceRead.model_validate(updated)

    async def remove_slot(self, service_id: int, slot: str) -> ServiceRead:
        """Remove a slot unless it is booked.  Removing an unknown slot changes nothing."""
        service = await self.get_service(service_id)
        booking = await self.store.find_one(
            BOOKINGS, lambda b: b.get("service_id") == service_id and b.get("slot") == slot
        )
        if booking is not None:
            raise Conflict(f"Slot {slot} has a booking and cannot be removed")
        updated = await self.store.update_record(
            SERVICES, service_id, {"slots": [s for s in service.slots if s != slot]}
        )
        if updated is None:
            raise RecordNotFound(f"Service {service_id} not found")
        return ServiceRead.model_validate(updated)

    async def available_slots(self, service_id: int) -> List[str]:
        service = await self.get_service(service_id)
        bookings = await self.store.find_many(BOOKINGS, lambda b: b.get("service_id") == service_id)
        booked = {b.get("slot") for b in bookings}
        return [s for s in service.slots if s not in booked]
