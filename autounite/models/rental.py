import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from autounite.exceptions import InvalidArgumentError, InvalidDateRangeError, InvalidStateError
from autounite.utils.calc import days_between, round2
from autounite.utils.constants import (
    LATE_RETURN_GRACE,
    CounterofferStatus,
    RentalStatus,
    TERMINAL_RENTAL_STATES,
)


@dataclass
class Rental:
    """
    A booking of one vehicle by one renter for a date range.

    The rental owns its pricing: `final_price` and `rental_duration` are derived
    and recomputed by the entity itself after every pricing-relevant change.
    Percentages are whole numbers (10 means 10%).
    """
    id: str
    vehicle_id: str
    renter_id: str
    owner_id: str
    start_date: datetime
    end_date: datetime
    base_price: float
    verification_code: str
    created_at: datetime
    discount_percentage: float = 0
    additional_charge_percentage: float = 0
    status: str = RentalStatus.PENDING
    payment_verified: bool = False
    notes: Optional[str] = None
    counteroffer_amount: Optional[float] = None
    counteroffer_status: Optional[str] = None
    is_late_return: bool = False
    original_end_date: Optional[datetime] = None
    actual_return_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    rental_duration: int = field(init=False, default=0)
    final_price: float = field(init=False, default=0.0)

    def __post_init__(self):
        if self.start_date is None or self.end_date is None:
            raise InvalidArgumentError("start_date and end_date are required")
        if self.start_date >= self.end_date:
            raise InvalidDateRangeError("Start date must be before end date")
        if self.original_end_date is None:
            self.original_end_date = self.end_date
        if self.updated_at is None:
            self.updated_at = self.created_at
        self.rental_duration = days_between(self.start_date, self.end_date)
        self._calculate_final_price()

    # --------------- pricing ---------------
    def _calculate_final_price(self) -> None:
        price = self.base_price
        if self.discount_percentage > 0:
            price = price * (1 - self.discount_percentage / 100)
        if self.additional_charge_percentage > 0:
            price = price * (1 + self.additional_charge_percentage / 100)
        # An accepted counteroffer replaces every adjustment above
        if self.counteroffer_status == CounterofferStatus.ACCEPTED and self.counteroffer_amount is not None:
            price = self.counteroffer_amount
        self.final_price = round2(price)

    @property
    def daily_rate(self) -> float:
        """Pre-discount price per day implied by the current base price."""
        return self.base_price / self.rental_duration

    # --------------- lifecycle ---------------
    def _require_not_terminal(self, action: str) -> None:
        if self.status in TERMINAL_RENTAL_STATES:
            raise InvalidStateError(f"Cannot {action} a {self.status.lower()} rental")

    def verify_payment(self, code: str) -> bool:
        """Activate the rental when `code` matches; a wrong code changes nothing."""
        self._require_not_terminal("verify payment for")
        if code != self.verification_code:
            return False
        self.payment_verified = True
        self.status = RentalStatus.ACTIVE
        return True

    def extend_rental(self, new_end_date: datetime) -> None:
        if not self.is_active():
            raise InvalidStateError("Only active rentals can be extended")
        if new_end_date is None or new_end_date <= self.end_date:
            raise InvalidDateRangeError("The new end date must be after the current end date")

        rate = self.daily_rate
        self.original_end_date = self.end_date
        self.end_date = new_end_date
        self.rental_duration = days_between(self.start_date, self.end_date)
        self.base_price = round2(self.rental_duration * rate)
        self._calculate_final_price()

    def complete_rental(self, return_date: datetime) -> None:
        if not self.is_active():
            raise InvalidStateError("Only active rentals can be completed")
        self.actual_return_date = return_date
        self.status = RentalStatus.COMPLETED
        if return_date - self.end_date > LATE_RETURN_GRACE:
            self.is_late_return = True

    def cancel_rental(self) -> None:
        self._require_not_terminal("cancel")
        self.status = RentalStatus.CANCELLED

    # --------------- counteroffers ---------------
    def submit_counteroffer(self, amount: float) -> None:
        if amount is None or not math.isfinite(amount):
            raise InvalidArgumentError("Counteroffer amount must be a finite number")
        self.counteroffer_amount = amount
        self.counteroffer_status = CounterofferStatus.PENDING
        self._calculate_final_price()

    def has_pending_counteroffer(self) -> bool:
        return self.counteroffer_status == CounterofferStatus.PENDING and self.counteroffer_amount is not None

    def accept_counteroffer(self) -> None:
        if self.has_pending_counteroffer():
            self.counteroffer_status = CounterofferStatus.ACCEPTED
            self._calculate_final_price()

    def reject_counteroffer(self) -> None:
        if self.counteroffer_status == CounterofferStatus.PENDING:
            self.counteroffer_status = CounterofferStatus.REJECTED
            self.counteroffer_amount = None

    # --------------- queries ---------------
    def is_active(self) -> bool:
        return self.status == RentalStatus.ACTIVE

    def is_pending(self) -> bool:
        return self.status == RentalStatus.PENDING

    def is_completed(self) -> bool:
        return self.status == RentalStatus.COMPLETED

    def is_cancelled(self) -> bool:
        return self.status == RentalStatus.CANCELLED

    def involves(self, user_id: str) -> bool:
        return user_id in (self.renter_id, self.owner_id)

    def touch(self, now: datetime) -> None:
        self.updated_at = now

    def to_dict(self, include_code: bool = False) -> dict:
        """JSON-friendly view; the verification code is only shown to the renter."""
        data = {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "renter_id": self.renter_id,
            "owner_id": self.owner_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "original_end_date": self.original_end_date.isoformat(),
            "actual_return_date": self.actual_return_date.isoformat() if self.actual_return_date else None,
            "rental_duration": self.rental_duration,
            "base_price": self.base_price,
            "discount_percentage": self.discount_percentage,
            "additional_charge_percentage": self.additional_charge_percentage,
            "final_price": self.final_price,
            "status": self.status,
            "payment_verified": self.payment_verified,
            "notes": self.notes,
            "counteroffer_amount": self.counteroffer_amount,
            "counteroffer_status": self.counteroffer_status,
            "is_late_return": self.is_late_return,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if include_code:
            data["verification_code"] = self.verification_code
        return data
