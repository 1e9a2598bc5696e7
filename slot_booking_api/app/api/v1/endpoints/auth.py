"""
Authentication endpoints for API v1.

Registration and login are public; ``/profile`` returns the account
behind the bearer token.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from slot_booking_api.app.api.deps import get_user_service
from slot_booking_api.app.core.security import get_current_user
from slot_booking_api.app.schemas.user import TokenResponse, UserCreate, UserLogin, UserRead
from slot_booking_api.app.services.errors import Conflict, RecordNotFound
from slot_booking_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    users: UserService = Depends(get_user_service),
) -> UserRead:
    """Register a new account.

    The first account registered on an empty platform is made an
    administrator; every later one is a regular user.  A 409 error is
    returned if the email is already taken.
    """
    try:
        return await users.register(payload)
    except Conflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: UserLogin,
    users: UserService = Depends(get_user_service),
) -> TokenResponse:
    try:
        user, token = await users.login(payload.email, payload.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    return TokenResponse(access_token=token, user=user)


@router.get("/profile", response_model=UserRead)
async def profile(
    current_user: dict = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserRead:
    try:
        return await users.get_user(current_user["id"])
    except RecordNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
