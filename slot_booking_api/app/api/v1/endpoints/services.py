"""
Service and slot endpoints for API v1.

Listing services and their free slots is public.  Creating, editing
and deleting services, and managing their slots, is reserved for
administrators.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from slot_booking_api.app.api.deps import get_service_service
from slot_booking_api.app.core.security import require_admin
from slot_booking_api.app.schemas.service import (
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
    SlotRemoval,
    SlotRequest,
)
from slot_booking_api.app.services.errors import Conflict, RecordNotFound
from slot_booking_api.app.services.service_service import ServiceService

router = APIRouter()


def _translate(e: ValueError) -> HTTPException:
    if isinstance(e, RecordNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[ServiceRead])
async def list_services(services: ServiceService = Depends(get_service_service)) -> List[ServiceRead]:
    return await services.list_services()


@router.get("/{service_id}", response_model=ServiceRead)
async def get_service(
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> ServiceRead:
    try:
        return await services.get_service(service_id)
    except ValueError as e:
        raise _translate(e) from e


@router.get("/{service_id}/slots/available", response_model=List[str])
async def available_slots(
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> List[str]:
    """Slots of the service that nobody has booked yet, in chronological order."""
    try:
        return await services.available_slots(service_id)
    except ValueError as e:
        raise _translate(e) from e


@router.post(
    "/",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_service(
    payload: ServiceCreate,
    services: ServiceService = Depends(get_service_service),
) -> ServiceRead:
    try:
        return await services.create_service(payload)
    except ValueError as e:
        raise _translate(e) from e


@router.patch("/{service_id}", response_model=ServiceRead, dependencies=[Depends(require_admin)])
async def update_service(
    payload: ServiceUpdate,
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> ServiceRead:
    try:
        return await services.update_service(service_id, payload)
    except ValueError as e:
        raise _translate(e) from e


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_service(
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> None:
    """Delete a service.  Services that still have bookings return 409."""
    try:
        await services.delete_service(service_id)
    except ValueError as e:
        raise _translate(e) from e


@router.post("/{service_id}/slots", response_model=ServiceRead, dependencies=[Depends(require_admin)])
async def add_slot(
    payload: SlotRequest,
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> ServiceRead:
    try:
        return await services.add_slot(service_id, payload.slot)
    except ValueError as e:
        raise _translate(e) from e


@router.delete("/{service_id}/slots", response_model=ServiceRead, dependencies=[Depends(require_admin)])
async def remove_slot(
    payload: SlotRemoval,
    service_id: int = Path(..., ge=1, description="ID of the service"),
    services: ServiceService = Depends(get_service_service),
) -> ServiceRead:
    try:
        return await services.remove_slot(service_id, payload.slot)
    except ValueError as e:
        raise _translate(e) from e
