"""
Pydantic models for bookable services.

A service is something that can be reserved (a room, a piece of
equipment, ...) together with the list of slots it offers.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import SLOT_PATTERN, StoredModel

ServiceType = Literal["room", "equipment", "other"]


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: ServiceType
    description: str = ""
    slots: List[str] = Field(default_factory=list, description="Slots formatted as YYYY-MM-DD HH:MM")

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class ServiceUpdate(BaseModel):
    """Schema for updating a service.

    Only the descriptive fields can be changed here; slots are managed
    through the dedicated slot endpoints so that booked slots cannot be
    dropped by accident.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[ServiceType] = None
    description: Optional[str] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class SlotRequest(BaseModel):
    slot: str = Field(..., pattern=SLOT_PATTERN, description="YYYY-MM-DD HH:MM")


class SlotRemoval(BaseModel):
    slot: str = Field(..., min_length=1)


class ServiceRead(StoredModel):
    name: str
    type: ServiceType
    description: str = ""
    slots: List[str] = Field(default_factory=list)


class ServiceSummary(BaseModel):
    id: int
    name: str
    type: ServiceType
