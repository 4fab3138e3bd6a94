"""Post-rental reviews and the rating aggregates they feed."""

from __future__ import annotations

import logging
from typing import Optional

from autounite.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    RentalNotFoundError,
    ReviewNotFoundError,
)
from autounite.models.review import Review
from autounite.models.store import Store
from autounite.services import common
from autounite.utils.constants import MAX_RATING, MIN_RATING, ReviewType

logger = logging.getLogger(__name__)


class ReviewService:

    def __init__(self, store: Optional[Store] = None, notifier=None, clock=None):
        self.store = store or common._store()
        self.notifier = notifier or common._notifier()
        self.clock = clock or common._clock()

    def _completed_rental(self, rental_id: str, review_type: str):
        rental = self.store.get_rental(rental_id)
        if rental is None:
            raise RentalNotFoundError(f"Error: rental with ID '{rental_id}' not found")
        if not rental.is_completed():
            raise InvalidStateError("Only completed rentals can be reviewed")
        if self.store.find_review(rental.id, review_type):
            raise ConflictError("This rental has already been reviewed")
        return rental

    @staticmethod
    def _validate_rating(rating) -> int:
        try:
            value = float(rating)
        except (TypeError, ValueError):
            raise InvalidArgumentError("Rating must be a whole number between 1 and 5")
        # nan and inf are not integers either
        if not value.is_integer() or not MIN_RATING <= value <= MAX_RATING:
            raise InvalidArgumentError("Rating must be a whole number between 1 and 5")
        return int(value)

    def _new_review(self, rental, review_type: str, rating: int, comment: str) -> Review:
        return Review(
            id=common.new_id(),
            rental_id=rental.id,
            type=review_type,
            vehicle_id=rental.vehicle_id,
            renter_id=rental.renter_id,
            owner_id=rental.owner_id,
            rating=rating,
            comment=(comment or "").strip(),
            created_at=self.clock.now(),
        )

    def _notify(self, user_id: str, title: str, message: str, related_id: str) -> None:
        try:
            self.notifier.notify(user_id, title, message, related_id=related_id)
        except Exception:
            logger.warning("Notification %r to user %s failed", title, user_id, exc_info=True)

    def create_vehicle_review(self, rental_id: str, rating, comment: str = "") -> Review:
        """The renter rates the vehicle; the vehicle's running average absorbs it."""
        rating = self._validate_rating(rating)
        with self.store.transaction():
            rental = self._completed_rental(rental_id, ReviewType.VEHICLE)
            review = self.store.save_review(self._new_review(rental, ReviewType.VEHICLE, rating, comment))
            vehicle = self.store.vehicles.get(rental.vehicle_id)
            if vehicle is not None:
                vehicle.update_rating(rating)
                vehicle.updated_at = review.created_at
                self.store.save_vehicle(vehicle)

        logger.info("Vehicle review %s (%d/5) for rental %s", review.id, rating, rental.id)
        self._notify(rental.owner_id, "New vehicle review",
                     f"Your vehicle received a {rating}-star review.", related_id=review.id)
        return review

    def create_renter_review(self, rental_id: str, rating, comment: str = "") -> Review:
        """The owner rates the renter, which feeds the loyalty discount."""
        rating = self._validate_rating(rating)
        with self.store.transaction():
            rental = self._completed_rental(rental_id, ReviewType.RENTER)
            review = self.store.save_review(self._new_review(rental, ReviewType.RENTER, rating, comment))
            renter = self.store.get_user(rental.renter_id)
            if renter is not None:
                renter.update_rating(rating)
                renter.updated_at = review.created_at
                self.store.save_user(renter)

        logger.info("Renter review %s (%d/5) for rental %s", review.id, rating, rental.id)
        self._notify(rental.renter_id, "New review",
                     f"The owner rated your rental with {rating} stars.", related_id=review.id)
        return review

    def get_review(self, review_id: str) -> Review:
        review = self.store.get_review(review_id)
        if review is None:
            raise ReviewNotFoundError(f"Error: review with ID '{review_id}' not found")
        return review

    def get_vehicle_reviews(self, vehicle_id: str, page: int = 1, limit: int = 10) -> dict:
        return common.paginate(self.store.find_reviews(ReviewType.VEHICLE, vehicle_id=vehicle_id), page, limit)

    def get_renter_reviews(self, renter_id: str, page: int = 1, limit: int = 10) -> dict:
        return common.paginate(self.store.find_reviews(ReviewType.RENTER, renter_id=renter_id), page, limit)
