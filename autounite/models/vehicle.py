from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from autounite.utils.calc import clamp
from autounite.utils.constants import (
    DEFAULT_RATING,
    MAX_RATING,
    MIN_RATING,
    VEHICLE_COOLDOWN,
    VehicleStatus,
)


@dataclass
class Vehicle:
    """
    A listed vehicle. `daily_rate` is the public price per day before any
    renter discount or surcharge is applied.
    """
    id: str
    owner_id: str
    brand: str
    model: str
    license_plate: str
    daily_rate: float
    created_at: datetime
    year: Optional[int] = None
    color: str = ""
    seats: Optional[int] = None
    description: str = ""
    status: str = VehicleStatus.PENDING_VERIFICATION
    is_available: bool = False
    rating: float = DEFAULT_RATING
    rating_count: int = 0
    rental_count: int = 0
    last_rental_end_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def label(self) -> str:
        return f"{self.brand} {self.model}".strip()

    def is_verified(self) -> bool:
        return self.status == VehicleStatus.VERIFIED

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def can_be_rented(self, now: datetime) -> bool:
        """Verified, flagged available, and rested a full day since its last rental ended."""
        if not self.is_verified() or not self.is_available or self.is_deleted():
            return False
        if self.last_rental_end_date is not None:
            return now >= self.last_rental_end_date + VEHICLE_COOLDOWN
        return True

    def mark_as_rented(self, end_date: datetime) -> None:
        self.is_available = False
        self.last_rental_end_date = end_date

    def mark_as_available(self) -> None:
        self.is_available = True

    def update_last_rental_date(self, end_date: Optional[datetime]) -> None:
        self.last_rental_end_date = end_date

    def increment_rental_count(self) -> None:
        self.rental_count += 1

    def update_rating(self, new_rating: float) -> None:
        """Fold one more review into the running average."""
        total = self.rating * self.rating_count + new_rating
        self.rating_count += 1
        self.rating = clamp(total / self.rating_count, MIN_RATING, MAX_RATING)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "brand": self.brand,
            "model": self.model,
            "year": self.year,
            "license_plate": self.license_plate,
            "color": self.color,
            "seats": self.seats,
            "daily_rate": self.daily_rate,
            "description": self.description,
            "status": self.status,
            "is_available": self.is_available,
            "rating": round(self.rating, 2),
            "rating_count": self.rating_count,
            "rental_count": self.rental_count,
            "last_rental_end_date": self.last_rental_end_date.isoformat() if self.last_rental_end_date else None,
        }
