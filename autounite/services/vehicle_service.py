from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from autounite.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    UserNotFoundError,
    VehicleNotFoundError,
)
from autounite.models.store import Store
from autounite.models.vehicle import Vehicle
from autounite.services import common
from autounite.utils.constants import VehicleStatus

logger = logging.getLogger(__name__)


class VehicleService:
    """Vehicle catalogue: create, verify, toggle availability, delete."""

    def __init__(self, store: Optional[Store] = None, clock=None):
        self.store = store or common._store()
        self.clock = clock or common._clock()

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        v = self.store.get_vehicle(vehicle_id)
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        return v

    def create_vehicle(self, owner_id: str, payload: dict) -> Vehicle:
        """
        List a new vehicle for `owner_id`. It starts unverified and unavailable
        until an administrator approves it.
        """
        owner = self.store.get_user(owner_id)
        if owner is None:
            raise UserNotFoundError(f"Error: owner with ID '{owner_id}' not found")
        if not owner.is_owner():
            raise InvalidArgumentError("Only owners can list vehicles")

        brand = (payload.get("brand") or "").strip()
        model = (payload.get("model") or "").strip()
        plate = (payload.get("license_plate") or "").strip().upper()
        rate = common.to_float_safe(payload.get("daily_rate"))

        if not brand or not model or not plate:
            raise InvalidArgumentError("brand, model and license_plate are required")
        if rate is None or rate <= 0:
            raise InvalidArgumentError("daily_rate must be a positive number")

        with self.store.transaction():
            if self.store.find_vehicle_by_plate(plate):
                raise ConflictError(f"A vehicle with plate '{plate}' already exists")
            vehicle = Vehicle(
                id=common.new_id(),
                owner_id=owner.id,
                brand=brand,
                model=model,
                license_plate=plate,
                daily_rate=common.round2(rate),
                year=payload.get("year"),
                color=(payload.get("color") or "").strip(),
                seats=payload.get("seats"),
                description=(payload.get("description") or "").strip(),
                created_at=self.clock.now(),
            )
            self.store.save_vehicle(vehicle)

        logger.info("Vehicle %s (%s) listed by owner %s", vehicle.id, vehicle.license_plate, owner.id)
        return vehicle

    def verify_vehicle(self, vehicle_id: str) -> Vehicle:
        v = self.get_vehicle(vehicle_id)
        v.status = VehicleStatus.VERIFIED
        v.is_available = True
        v.updated_at = self.clock.now()
        return self.store.save_vehicle(v)

    def update_availability(self, vehicle_id: str, is_available: bool) -> Vehicle:
        """Owners may pause or resume a listing; only verified vehicles can be opened."""
        v = self.get_vehicle(vehicle_id)
        if is_available and not v.is_verified():
            raise InvalidStateError("The vehicle has not been verified yet")
        if is_available and any(r.is_active() for r in self.store.find_active_rentals_by_vehicle(v.id)):
            raise InvalidStateError("The vehicle is currently rented")
        v.is_available = bool(is_available)
        v.updated_at = self.clock.now()
        return self.store.save_vehicle(v)

    def delete_vehicle(self, vehicle_id: str) -> None:
        """
        Soft-delete a vehicle if and only if no PENDING or ACTIVE rental
        still references it. Past rentals keep pointing at the record.
        """
        with self.store.transaction():
            v = self.get_vehicle(vehicle_id)
            if self.store.find_active_rentals_by_vehicle(v.id):
                raise InvalidStateError("Cannot delete: pending or active rentals exist")
            now = self.clock.now()
            v.deleted_at = now
            v.is_available = False
            v.updated_at = now
            self.store.save_vehicle(v)
        logger.info("Vehicle %s deleted", vehicle_id)

    def get_owner_vehicles(self, owner_id: str, page: int = 1, limit: int = 10) -> dict:
        return common.paginate(self.store.find_vehicles_by_owner(owner_id), page, limit)

    def availability_calendar(self, vehicle_id: str) -> List[Tuple[str, str]]:
        """
        Return (start, end) ISO pairs for PENDING/ACTIVE rentals, sorted by start.
        Used by clients to disable booked date ranges.
        """
        self.get_vehicle(vehicle_id)
        return [
            (r.start_date.isoformat(), r.end_date.isoformat())
            for r in self.store.find_active_rentals_by_vehicle(vehicle_id)
        ]
