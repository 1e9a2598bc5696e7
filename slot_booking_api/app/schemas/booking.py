"""
Pydantic models for bookings.

A booking reserves one slot of one service for one user.  Listing
endpoints enrich bookings with short summaries of the service and,
for administrators, of the user who made it.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .common import SLOT_PATTERN, StoredModel
from .service import ServiceSummary
from .user import UserSummary

BookingStatus = Literal["confirmed", "cancelled", "completed"]


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    service_id: int = Field(..., ge=1)
    slot: str = Field(..., pattern=SLOT_PATTERN, description="YYYY-MM-DD HH:MM")


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingRead(StoredModel):
    user_id: int
    service_id: int
    slot: str
    status: BookingStatus
    service: Optional[ServiceSummary] = None
    user: Optional[UserSummary] = None
