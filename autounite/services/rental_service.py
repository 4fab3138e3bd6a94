"""Rental lifecycle: booking, counteroffers, payment verification, extension, completion, cancellation."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from autounite.exceptions import (
    InvalidArgumentError,
    InvalidDateRangeError,
    InvalidStateError,
    RentalNotFoundError,
    UserNotFoundError,
    VehicleNotFoundError,
    VehicleUnavailableError,
)
from autounite.models.rental import Rental
from autounite.models.store import Store
from autounite.services import common
from autounite.services.availability import Availability, check_vehicle_availability
from autounite.utils.constants import (
    LATE_RETURN_BLOCK_DAYS,
    LATE_RETURN_SURCHARGE_PERCENTAGE,
    LOYALTY_DISCOUNT_PERCENTAGE,
    MIN_COUNTEROFFER_AMOUNT,
    RentalStatus,
)
from autounite.utils.filters import fmt_local, fmt_money

logger = logging.getLogger(__name__)


class RentalService:
    """
    Orchestrates the rental state machine and its side effects on vehicles and users.

    Every command validates first and raises a typed error before touching
    anything. Writes to the rental, vehicle and renter happen inside one
    store transaction, so they commit together. Notifications go out after
    commit and never undo a committed transition.
    """

    def __init__(self, store: Optional[Store] = None, notifier=None, clock=None):
        self.store = store or common._store()
        self.notifier = notifier or common._notifier()
        self.clock = clock or common._clock()

    # --------------- helpers ---------------
    def _get_rental(self, rental_id: str) -> Rental:
        rental = self.store.get_rental(rental_id)
        if rental is None:
            raise RentalNotFoundError(f"Error: rental with ID '{rental_id}' not found")
        return rental

    def _notify(self, user_id: str, title: str, message: str, related_id: Optional[str] = None) -> None:
        """Fire-and-forget: delivery problems are logged, the transition stands."""
        try:
            self.notifier.notify(user_id, title, message, related_id=related_id)
        except Exception:
            logger.warning("Notification %r to user %s failed", title, user_id, exc_info=True)

    def _vehicle_label(self, vehicle_id: str) -> str:
        vehicle = self.store.get_vehicle(vehicle_id)
        return vehicle.label if vehicle else "the vehicle"

    # --------------- queries ---------------
    def get_rental(self, rental_id: str) -> Rental:
        return self._get_rental(rental_id)

    def get_user_rentals(self, user_id: str, role: Optional[str] = None, status: Optional[str] = None,
                         page: int = 1, limit: int = 10) -> dict:
        if role not in (None, "renter", "owner"):
            raise InvalidArgumentError("role must be 'renter' or 'owner'")
        rentals = self.store.find_rentals_by_user(user_id, role=role, status=status)
        return common.paginate(rentals, page, limit)

    def check_vehicle_availability(self, vehicle_id: str, start: datetime, end: datetime) -> Availability:
        if self.store.get_vehicle(vehicle_id) is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        if start >= end:
            raise InvalidDateRangeError("Start date must be before end date")
        return check_vehicle_availability(self.store, vehicle_id, start, end)

    # --------------- create ---------------
    def create_rental(
            self,
            renter_id: str,
            vehicle_id: str,
            start_date: datetime,
            end_date: datetime,
            notes: Optional[str] = None,
            counteroffer_amount: Optional[float] = None,
    ) -> Rental:
        """
        Book a vehicle for [start_date, end_date].

        Pricing: base = daily_rate x days (partial days round up); renters with a
        rating of at least 4.7 and no reports get 10% off; a renter who returned
        the previous vehicle late pays a one-off 15% surcharge.
        """
        now = self.clock.now()

        with self.store.transaction():
            vehicle = self.store.get_vehicle(vehicle_id)
            if vehicle is None:
                raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
            if not vehicle.can_be_rented(now):
                raise VehicleUnavailableError("The vehicle is not available for rental")

            renter = self.store.get_user(renter_id)
            if renter is None:
                raise UserNotFoundError(f"Error: renter with ID '{renter_id}' not found")
            if not renter.is_renter():
                raise InvalidArgumentError("Only renters can book vehicles")

            if renter.is_blocked:
                if renter.is_blocked_at(now):
                    raise InvalidStateError(f"User is blocked until {fmt_local(renter.blocked_until)}")
                renter.unblock()
                renter.updated_at = now
                self.store.save_user(renter)
                logger.info("User %s unblocked after penalty expiry", renter.id)

            if renter.id == vehicle.owner_id:
                raise InvalidArgumentError("You cannot rent your own vehicle")

            owner = self.store.get_user(vehicle.owner_id)
            if owner is None:
                raise UserNotFoundError(f"Error: owner with ID '{vehicle.owner_id}' not found")

            if start_date is None or end_date is None:
                raise InvalidArgumentError("start_date and end_date are required")
            if start_date < now:
                raise InvalidDateRangeError("Start date cannot be in the past")
            if start_date >= end_date:
                raise InvalidDateRangeError("Start date must be before end date")

            availability = check_vehicle_availability(self.store, vehicle.id, start_date, end_date)
            if not availability.is_available:
                raise VehicleUnavailableError("The vehicle is not available for the selected dates")

            if counteroffer_amount is not None:
                self._validate_amount(counteroffer_amount)

            days = common.days_between(start_date, end_date)
            discount = LOYALTY_DISCOUNT_PERCENTAGE if renter.is_eligible_for_discount() else 0
            surcharge = 0
            if renter.late_return_surcharge_pending:
                surcharge = LATE_RETURN_SURCHARGE_PERCENTAGE
                renter.late_return_surcharge_pending = False
                renter.updated_at = now
                self.store.save_user(renter)

            rental = Rental(
                id=common.new_id(),
                vehicle_id=vehicle.id,
                renter_id=renter.id,
                owner_id=owner.id,
                start_date=start_date,
                end_date=end_date,
                base_price=common.round2(vehicle.daily_rate * days),
                discount_percentage=discount,
                additional_charge_percentage=surcharge,
                verification_code=common.generate_verification_code(),
                notes=notes,
                created_at=now,
            )
            if counteroffer_amount is not None:
                rental.submit_counteroffer(counteroffer_amount)
            self.store.save_rental(rental)

        logger.info("Rental %s created for vehicle %s (%d days, %.2f)", rental.id, vehicle.id, days, rental.final_price)
        self._notify(
            renter.id,
            "Rental request created",
            f"Your request for {vehicle.label} from {fmt_local(start_date)} to {fmt_local(end_date)} "
            f"was created. Total: {fmt_money(rental.final_price)}. "
            f"Your payment verification code is {rental.verification_code}.",
            related_id=rental.id,
        )
        self._notify(
            owner.id,
            "New rental request",
            f"{renter.full_name} requested {vehicle.label} from {fmt_local(start_date)} to {fmt_local(end_date)}.",
            related_id=rental.id,
        )
        return rental

    # --------------- counteroffers ---------------
    @staticmethod
    def _validate_amount(amount: float) -> None:
        if amount is None or not math.isfinite(amount):
            raise InvalidArgumentError("Counteroffer amount must be a finite number")
        if amount <= 0:
            raise InvalidArgumentError("Counteroffer amount must be positive")
        if amount < MIN_COUNTEROFFER_AMOUNT:
            raise InvalidArgumentError(f"Counteroffer amount must be at least {MIN_COUNTEROFFER_AMOUNT}")

    def submit_counter_offer(self, rental_id: str, amount: float) -> Rental:
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not rental.is_pending():
                raise InvalidStateError("Counteroffers are only allowed on pending rentals")
            self._validate_amount(amount)
            rental.submit_counteroffer(amount)
            rental.touch(self.clock.now())
            self.store.save_rental(rental)

        self._notify(
            rental.owner_id,
            "New counteroffer",
            f"A counteroffer of {fmt_money(amount)} was made for {self._vehicle_label(rental.vehicle_id)}.",
            related_id=rental.id,
        )
        return rental

    def accept_counter_offer(self, rental_id: str) -> Rental:
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not rental.has_pending_counteroffer():
                raise InvalidStateError("There is no pending counteroffer for this rental")
            rental.accept_counteroffer()
            rental.touch(self.clock.now())
            self.store.save_rental(rental)

        self._notify(
            rental.renter_id,
            "Counteroffer accepted",
            f"Your counteroffer of {fmt_money(rental.counteroffer_amount)} for "
            f"{self._vehicle_label(rental.vehicle_id)} was accepted.",
            related_id=rental.id,
        )
        return rental

    def reject_counter_offer(self, rental_id: str) -> Rental:
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not rental.has_pending_counteroffer():
                raise InvalidStateError("There is no pending counteroffer for this rental")
            rental.reject_counteroffer()
            rental.touch(self.clock.now())
            self.store.save_rental(rental)

        self._notify(
            rental.renter_id,
            "Counteroffer rejected",
            f"Your counteroffer for {self._vehicle_label(rental.vehicle_id)} was rejected.",
            related_id=rental.id,
        )
        return rental

    # --------------- payment ---------------
    def verify_payment(self, rental_id: str, code: str) -> Rental:
        """
        Activate a pending rental once the owner confirms the renter's code.
        Repeating the call on an active rental with the right code is a no-op.
        """
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            was_pending = rental.is_pending()
            if not rental.verify_payment(code):
                raise InvalidArgumentError("Invalid verification code")
            if not was_pending:
                return rental

            now = self.clock.now()
            rental.touch(now)
            self.store.save_rental(rental)

            vehicle = self.store.get_vehicle(rental.vehicle_id)
            if vehicle is not None:
                vehicle.mark_as_rented(rental.end_date)
                vehicle.updated_at = now
                self.store.save_vehicle(vehicle)

        logger.info("Rental %s payment verified; now %s", rental.id, rental.status)
        self._notify(
            rental.renter_id,
            "Payment verified",
            f"Your payment for {self._vehicle_label(rental.vehicle_id)} was verified. The rental is now active.",
            related_id=rental.id,
        )
        return rental

    # --------------- extend ---------------
    def extend_rental(self, rental_id: str, new_end_date: datetime) -> Rental:
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not rental.is_active():
                raise InvalidStateError("Only active rentals can be extended")
            if new_end_date is None or new_end_date <= rental.end_date:
                raise InvalidDateRangeError("The new end date must be after the current end date")

            availability = check_vehicle_availability(
                self.store, rental.vehicle_id, rental.end_date, new_end_date, exclude_rental_id=rental.id,
            )
            if not availability.is_available:
                raise VehicleUnavailableError("The vehicle is not available for the requested extension")

            now = self.clock.now()
            rental.extend_rental(new_end_date)
            rental.touch(now)
            self.store.save_rental(rental)

            vehicle = self.store.get_vehicle(rental.vehicle_id)
            if vehicle is not None:
                vehicle.update_last_rental_date(new_end_date)
                vehicle.updated_at = now
                self.store.save_vehicle(vehicle)

        logger.info("Rental %s extended to %s", rental.id, new_end_date.isoformat())
        self._notify(
            rental.owner_id,
            "Rental extended",
            f"The rental of your {self._vehicle_label(rental.vehicle_id)} was extended until "
            f"{fmt_local(new_end_date, with_time=False)}.",
            related_id=rental.id,
        )
        return rental

    # --------------- complete ---------------
    def complete_rental(self, rental_id: str, return_date: Optional[datetime] = None) -> Rental:
        """
        Close an active rental. Returning more than 30 minutes after the end
        date blocks the renter for 4 days and flags a surcharge on their next rental.
        """
        now = self.clock.now()
        return_date = return_date or now

        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not rental.is_active():
                raise InvalidStateError("Only active rentals can be completed")

            rental.complete_rental(return_date)
            rental.touch(now)
            self.store.save_rental(rental)

            vehicle = self.store.get_vehicle(rental.vehicle_id)
            if vehicle is not None:
                vehicle.increment_rental_count()
                vehicle.update_last_rental_date(return_date)
                vehicle.mark_as_available()
                vehicle.updated_at = now
                self.store.save_vehicle(vehicle)

            renter = self.store.get_user(rental.renter_id)
            if rental.is_late_return and renter is not None:
                renter.block(LATE_RETURN_BLOCK_DAYS, now)
                renter.late_return_surcharge_pending = True
                renter.updated_at = now
                self.store.save_user(renter)

        logger.info("Rental %s completed (late=%s)", rental.id, rental.is_late_return)
        label = self._vehicle_label(rental.vehicle_id)
        if rental.is_late_return:
            self._notify(
                rental.renter_id,
                "Late return penalty",
                f"Because the vehicle was returned late, your account is blocked for {LATE_RETURN_BLOCK_DAYS} days "
                f"and a {LATE_RETURN_SURCHARGE_PERCENTAGE}% surcharge will apply to your next rental.",
                related_id=rental.id,
            )
        self._notify(
            rental.renter_id,
            "How was your rental?",
            f"Your rental of {label} is complete. Please leave a review of the vehicle.",
            related_id=rental.id,
        )
        self._notify(
            rental.owner_id,
            "Rental completed",
            f"The rental of your {label} was marked as completed.",
            related_id=rental.id,
        )
        return rental

    # --------------- cancel ---------------
    def _last_return(self, vehicle_id: str) -> Optional[datetime]:
        """When the vehicle last came back from a completed rental, if ever."""
        returns = [
            r.actual_return_date or r.end_date
            for r in self.store.find_rentals_by_status(RentalStatus.COMPLETED)
            if r.vehicle_id == vehicle_id
        ]
        return max(returns, default=None)

    def cancel_rental(self, rental_id: str) -> Rental:
        with self.store.transaction():
            rental = self._get_rental(rental_id)
            if not (rental.is_pending() or rental.is_active()):
                raise InvalidStateError("This rental cannot be cancelled in its current state")

            was_active = rental.is_active()
            now = self.clock.now()
            rental.cancel_rental()
            rental.touch(now)
            self.store.save_rental(rental)

            if was_active:
                vehicle = self.store.get_vehicle(rental.vehicle_id)
                if vehicle is not None:
                    vehicle.mark_as_available()
                    vehicle.update_last_rental_date(self._last_return(vehicle.id))
                    vehicle.updated_at = now
                    self.store.save_vehicle(vehicle)

        logger.info("Rental %s cancelled (was %s)", rental.id,
                    RentalStatus.ACTIVE if was_active else RentalStatus.PENDING)
        label = self._vehicle_label(rental.vehicle_id)
        self._notify(rental.renter_id, "Rental cancelled", f"Your rental of {label} was cancelled.",
                     related_id=rental.id)
        self._notify(rental.owner_id, "Rental cancelled", f"The rental of your {label} was cancelled.",
                     related_id=rental.id)
        return rental
