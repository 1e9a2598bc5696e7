"""
User administration endpoints for API v1.

Every route here requires an administrator token.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from slot_booking_api.app.api.deps import get_user_service
from slot_booking_api.app.core.security import require_admin
from slot_booking_api.app.schemas.user import RoleUpdate, UserRead
from slot_booking_api.app.services.errors import RecordNotFound
from slot_booking_api.app.services.user_service import UserService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/", response_model=List[UserRead])
async def list_users(users: UserService = Depends(get_user_service)) -> List[UserRead]:
    return await users.list_users()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int = Path(..., ge=1, description="ID of the user"),
    users: UserService = Depends(get_user_service),
) -> UserRead:
    try:
        return await users.get_user(user_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.patch("/{user_id}/role", response_model=UserRead)
async def update_user_role(
    payload: RoleUpdate,
    user_id: int = Path(..., ge=1, description="ID of the user"),
    users: UserService = Depends(get_user_service),
) -> UserRead:
    """Promote a user to ``admin`` or demote them to ``user``."""
    try:
        return await users.update_role(user_id, payload.role)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int = Path(..., ge=1, description="ID of the user"),
    users: UserService = Depends(get_user_service),
) -> None:
    try:
        await users.delete_user(user_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
