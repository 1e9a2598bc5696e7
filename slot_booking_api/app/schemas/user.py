"""
Pydantic models for user data.

Defines schemas for registering, authenticating and reading users.
Password hashes are stored with the user record but never appear in
any response model.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import StoredModel

Role = Literal["user", "admin"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserBase(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Login email, unique per user")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class UserCreate(UserBase):
    """Schema for registering a user."""

    password: str = Field(..., min_length=6, description="At least six characters")


class UserLogin(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class UserRead(StoredModel, UserBase):
    """Schema for reading a user from the API."""

    role: Role = "user"


class UserSummary(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
