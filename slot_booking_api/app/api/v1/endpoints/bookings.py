"""
Booking endpoints for API v1.

Authenticated users create bookings for themselves, list their own
bookings and cancel them.  Administrators can list every booking,
cancel any booking and change a booking's status.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from slot_booking_api.app.api.deps import get_booking_service
from slot_booking_api.app.core.security import get_current_user, get_optional_user, require_admin
from slot_booking_api.app.schemas.booking import BookingCreate, BookingRead, BookingStatusUpdate
from slot_booking_api.app.services.booking_service import BookingService
from slot_booking_api.app.services.errors import Conflict, RecordNotFound

router = APIRouter()


@router.get("/my-bookings", response_model=List[BookingRead])
async def my_bookings(
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    return await bookings.list_user_bookings(current_user["id"])


@router.get("/", response_model=List[BookingRead])
async def list_bookings(
    service_id: Optional[int] = Query(None, ge=1, description="Only bookings of this service"),
    current_user: Optional[dict] = Depends(get_optional_user),
    bookings: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    """List bookings.

    With ``service_id`` anyone, signed in or not, gets the bookings of
    that service (used to render its agenda).  Without it the full list,
    enriched with service and user details, is returned to
    administrators only.
    """
    if service_id is not None:
        return await bookings.list_service_bookings(service_id)
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator privileges required")
    return await bookings.list_all_bookings()


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int = Path(..., ge=1, description="ID of the booking"),
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Retrieve a single booking.  Only its owner and administrators may see it."""
    try:
        booking = await bookings.get_booking(booking_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    if current_user.get("role") != "admin" and booking.user_id != current_user["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions to view this booking")
    return booking


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Book a slot for the current user.

    Returns 404 for an unknown service, 400 for a slot the service does
    not offer and 409 when the slot is taken or clashes with another of
    the user's bookings.
    """
    try:
        return await bookings.create_booking(current_user["id"], payload)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except Conflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: int = Path(..., ge=1, description="ID of the booking"),
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> None:
    try:
        await bookings.cancel_booking(
            booking_id, current_user["id"], is_admin=current_user.get("role") == "admin"
        )
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e


@router.patch("/{booking_id}/status", response_model=BookingRead, dependencies=[Depends(require_admin)])
async def update_booking_status(
    payload: BookingStatusUpdate,
    booking_id: int = Path(..., ge=1, description="ID of the booking"),
    bookings: BookingService = Depends(get_booking_service),
) -> BookingRead:
    try:
        return await bookings.update_status(booking_id, payload.status)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
