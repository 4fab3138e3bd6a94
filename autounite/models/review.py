from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from autounite.utils.constants import ReviewType


@dataclass
class Review:
    """A 1..5 rating left after a completed rental, either for the vehicle or for the renter."""
    id: str
    rental_id: str
    type: str  # VEHICLE | RENTER
    renter_id: str
    owner_id: str
    rating: int
    comment: str
    created_at: datetime
    vehicle_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def is_vehicle_review(self) -> bool:
        return self.type == ReviewType.VEHICLE

    def is_renter_review(self) -> bool:
        return self.type == ReviewType.RENTER

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rental_id": self.rental_id,
            "type": self.type,
            "vehicle_id": self.vehicle_id,
            "renter_id": self.renter_id,
            "owner_id": self.owner_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(),
        }
