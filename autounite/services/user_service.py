from __future__ import annotations

import logging
import re
from typing import Optional

from autounite.exceptions import ConflictError, InvalidArgumentError, UnauthorizedError, UserNotFoundError
from autounite.models.store import Store
from autounite.models.user import User
from autounite.services import common
from autounite.utils.constants import Role, UserStatus
from autounite.utils.security import check_hash, generate_hash

logger = logging.getLogger(__name__)

# Compile once at module import
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{6,}$")


class UserService:
    """Registration, login and the admin-side account actions."""

    def __init__(self, store: Optional[Store] = None, clock=None):
        self.store = store or common._store()
        self.clock = clock or common._clock()

    def get_user(self, user_id: str) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")
        return user

    def register_user(self, email: str, password: str, first_name: str, last_name: str,
                      role: str = Role.RENTER, phone_number: str = "") -> User:
        email = (email or "").strip().lower()
        role = (role or "").upper().strip()

        if not EMAIL_PATTERN.match(email):
            raise InvalidArgumentError("A valid email is required")
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise InvalidArgumentError("First and last name are required")
        if role not in (Role.RENTER, Role.OWNER):
            raise InvalidArgumentError("Role must be RENTER or OWNER")
        # Password policy (server-side enforcement)
        if not PASSWORD_PATTERN.match(password or ""):
            raise InvalidArgumentError("Password must have at least 6 characters, including A-Z, a-z, and 0-9")

        with self.store.transaction():
            if self.store.find_user_by_email(email):
                raise ConflictError("Email already registered")
            user = User(
                id=common.new_id(),
                email=email,
                password_hash=generate_hash(password),
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                role=role,
                phone_number=(phone_number or "").strip(),
                created_at=self.clock.now(),
            )
            self.store.save_user(user)

        logger.info("Registered %s user %s", role, user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.store.find_user_by_email(email)
        if not user or not check_hash(password or "", user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        return user

    def verify_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        user.status = UserStatus.VERIFIED
        user.updated_at = self.clock.now()
        return self.store.save_user(user)

    def unblock_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        user.unblock()
        user.updated_at = self.clock.now()
        logger.info("User %s unblocked by an administrator", user.id)
        return self.store.save_user(user)
