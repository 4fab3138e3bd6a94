"""Date-range availability of a vehicle against its PENDING/ACTIVE rentals."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from autounite.models.store import Store


@dataclass
class Availability:
    is_available: bool
    conflicting_dates: List[Tuple[datetime, datetime]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_available": self.is_available,
            "conflicting_dates": [[s.isoformat(), e.isoformat()] for s, e in self.conflicting_dates],
        }


def check_vehicle_availability(
        store: Store,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_rental_id: Optional[str] = None,
) -> Availability:
    """
    A vehicle is free for [start, end] when no PENDING or ACTIVE rental of it
    starts inside the window, ends inside it, or spans it entirely.
    COMPLETED and CANCELLED rentals never block.

    `exclude_rental_id` lets an extension ignore the rental being extended.
    """
    conflicts = [
        r for r in store.find_rentals_by_vehicle_and_date_range(vehicle_id, start, end)
        if r.id != exclude_rental_id
    ]
    return Availability(
        is_available=not conflicts,
        conflicting_dates=[(r.start_date, r.end_date) for r in conflicts],
    )
