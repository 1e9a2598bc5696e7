"""
Business logic for users.

The ``UserService`` handles registration, authentication and the
administrative user operations (listing, role changes, deletion).
Passwords are stored as PBKDF2 hashes and stripped from every value
returned to callers.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import Settings
from ..core.security import create_access_token, hash_password, verify_password
from ..core.store import JsonStore
from ..schemas.user import UserCreate, UserRead
from .errors import Conflict, RecordNotFound

logger = logging.getLogger(__name__)

USERS = "users"
ROLES = ("user", "admin")


def _public(user: Dict[str, Any]) -> UserRead:
    data = {k: v for k, v in user.items() if k != "password"}
    return UserRead.model_validate(data)


class UserService:
    """Service for registering, authenticating and managing users."""

    def __init__(self, store: JsonStore, config: Optional[Settings] = None) -> None:
        self.store = store
        self.config = config

    async def register(self, data: UserCreate) -> UserRead:
        """Create a new user account.

        The email must not be in use yet.  New accounts get the ``user``
        role, except the very first account of an empty store, which
        becomes ``admin`` so the platform can be administered at all.
        """
        email = data.email
        is_first = not await self.store.read_collection(USERS)
        fields = {
            "email": email,
            "password": hash_password(data.password),
            "first_name": data.first_name,
            "last_name": data.last_name,
            "role": "admin" if is_first else "user",
        }
        user, created = await self.store.create_if_absent(
            USERS, lambda u: u.get("email") == email, fields
        )
        if not created:
            raise Conflict(f"A user with email {email} already exists")
        logger.info("Registered user %s (id=%s, role=%s)", email, user["id"], user["role"])
        return _public(user)

    async def authenticate(self, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``."""
        email = email.strip().lower()
        user = await self.store.find_one(USERS, lambda u: u.get("email") == email)
        if user is None or not verify_password(password, user.get("password", "")):
            logger.info("Failed login attempt for %s", email)
            return None
        return _public(user)

    async def login(self, email: str, password: str) -> Tuple[UserRead, str]:
        """Authenticate and issue an access token.

        Raises ``ValueError`` with a deliberately vague message when the
        email is unknown or the password is wrong.
        """
        user = await self.authenticate(email, password)
        if user is None:
            raise ValueError("Invalid email or password")
        token = create_access_token(
            {"sub": user.email, "user_id": user.id, "role": user.role},
            config=self.config,
        )
        return user, token

    async def get_user(self, user_id: int) -> UserRead:
        user = await self.store.find_by_id(USERS, user_id)
        if user is None:
            raise RecordNotFound(f"User {user_id} not found")
        return _public(user)

    async def list_users(self) -> List[UserRead]:
        return [_public(u) for u in await self.store.read_collection(USERS)]

    async def update_role(self, user_id: int, role: str) -> UserRead:
        if role not in ROLES:
            raise ValueError(f"Invalid role {role!r}")
        user = await self.store.update_record(USERS, user_id, {"role": role})
        if user is None:
            raise RecordNotFound(f"User {user_id} not found")
        logger.info("User %s role set to %s", user_id, role)
        return _public(user)

    async def delete_user(self, user_id: int) -> None:
        if not await self.store.delete_record(USERS, user_id):
            raise RecordNotFound(f"User {user_id} not found")
        logger.info("Deleted user %s", user_id)

    async def set_password(self, email: str, password: str) -> UserRead:
        """Replace the password of the user registered under ``email``."""
        email = email.strip().lower()
        user = await self.store.find_one(USERS, lambda u: u.get("email") == email)
        if user is None:
            raise RecordNotFound(f"User with email {email} not found")
        updated = await self.store.update_record(USERS, user["id"], {"password": hash_password(password)})
        if updated is None:
            raise RecordNotFound(f"User with email {email} not found")
        logger.info("Password reset for %s", email)
        return _public(updated)
