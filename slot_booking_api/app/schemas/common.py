"""Shared field definitions for the API schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Slots are plain strings of the form ``YYYY-MM-DD HH:MM``.
SLOT_PATTERN = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$"


class StoredModel(BaseModel):
    """Base for models read back from the store.

    The store writes its bookkeeping timestamps as ``createdAt`` and
    ``updatedAt``; they are exposed under the same names.
    """

    id: int
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = {
        "populate_by_name": True,
    }
