from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from autounite.utils.calc import clamp
from autounite.utils.constants import (
    DEFAULT_RATING,
    LOYALTY_MIN_RATING,
    MAX_RATING,
    MIN_RATING,
    Role,
    UserStatus,
)


@dataclass
class User:
    """
    A marketplace account. Renters carry the penalty state the rental
    lifecycle reads and writes (rating, report count, blocking).
    """
    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: str  # RENTER | OWNER | ADMIN
    created_at: datetime
    phone_number: str = ""
    status: str = UserStatus.PENDING_VERIFICATION
    rating: float = DEFAULT_RATING
    rating_count: int = 0
    report_count: int = 0
    is_blocked: bool = False
    blocked_until: Optional[datetime] = None
    late_return_surcharge_pending: bool = False
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_renter(self) -> bool:
        return self.role == Role.RENTER

    def is_owner(self) -> bool:
        return self.role == Role.OWNER

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_verified(self) -> bool:
        return self.status == UserStatus.VERIFIED

    def is_eligible_for_discount(self) -> bool:
        return self.rating >= LOYALTY_MIN_RATING and self.report_count == 0

    def is_blocked_at(self, now: datetime) -> bool:
        """A block without an end date never expires on its own."""
        if not self.is_blocked:
            return False
        return self.blocked_until is None or self.blocked_until > now

    def block(self, days: int, now: datetime) -> None:
        self.is_blocked = True
        self.blocked_until = now + timedelta(days=days)

    def unblock(self) -> None:
        self.is_blocked = False
        self.blocked_until = None

    def update_rating(self, new_rating: float) -> None:
        total = self.rating * self.rating_count + new_rating
        self.rating_count += 1
        self.rating = clamp(total / self.rating_count, MIN_RATING, MAX_RATING)

    def increase_report_count(self) -> None:
        self.report_count += 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "role": self.role,
            "status": self.status,
            "rating": round(self.rating, 2),
            "rating_count": self.rating_count,
            "report_count": self.report_count,
            "is_blocked": self.is_blocked,
            "blocked_until": self.blocked_until.isoformat() if self.blocked_until else None,
        }
