"""Liveness endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from slot_booking_api.app.api.deps import get_store
from slot_booking_api.app.core.store import JsonStore

router = APIRouter()


@router.get("/health")
async def health(store: JsonStore = Depends(get_store)) -> dict:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": {"initialized": store.path.exists(), "locked": store.lock.is_locked()},
    }
