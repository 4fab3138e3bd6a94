"""
Reviews close the loop on a completed rental: the renter rates the vehicle,
the owner rates the renter, each at most once.
"""
import pytest

from autounite.exceptions import ConflictError, InvalidArgumentError, InvalidStateError, RentalNotFoundError
from conftest import at


@pytest.fixture
def reviews(store, notifier, clock):
    from autounite.services.review_service import ReviewService
    return ReviewService(store=store, notifier=notifier, clock=clock)


@pytest.fixture
def finished(rentals, parties, clock):
    _, renter, vehicle = parties
    r = rentals.create_rental(renter.id, vehicle.id, at(days=1), at(days=2))
    rentals.verify_payment(r.id, r.verification_code)
    clock.advance(days=2)
    return rentals.complete_rental(r.id)


def test_vehicle_review_updates_vehicle_rating(reviews, store, finished, sender):
    rv = reviews.create_vehicle_review(finished.id, 3, "  ok car ")
    assert rv.is_vehicle_review()
    assert rv.comment == "ok car"
    v = store.get_vehicle(finished.vehicle_id)
    assert v.rating == 3.0 and v.rating_count == 1
    assert "New vehicle review" in sender.titles_for(finished.owner_id)


def test_renter_review_updates_renter_rating(reviews, store, finished):
    reviews.create_renter_review(finished.id, 5)
    renter = store.get_user(finished.renter_id)
    # 4.0 seeded with no prior reviews: the first review replaces it
    assert renter.rating == 5.0 and renter.rating_count == 1


def test_one_review_per_kind(reviews, finished):
    reviews.create_vehicle_review(finished.id, 4)
    reviews.create_renter_review(finished.id, 4)
    with pytest.raises(ConflictError):
        reviews.create_vehicle_review(finished.id, 5)


@pytest.mark.parametrize("rating", [0, 6, "x", None, 4.7, "2.5", float("inf"), float("nan")])
def test_rating_range(reviews, finished, rating):
    with pytest.raises(InvalidArgumentError):
        reviews.create_vehicle_review(finished.id, rating)


@pytest.mark.parametrize("rating", [4.0, "4"])
def test_whole_rating_accepted_in_any_form(reviews, finished, rating):
    assert reviews.create_vehicle_review(finished.id, rating).rating == 4


def test_rental_must_be_completed(reviews, rentals, store, parties):
    _, renter, vehicle = parties
    r = rentals.create_rental(renter.id, vehicle.id, at(days=1), at(days=2))
    with pytest.raises(InvalidStateError):
        reviews.create_vehicle_review(r.id, 4)
    with pytest.raises(RentalNotFoundError):
        reviews.create_vehicle_review("missing", 4)


def test_listing_reviews(reviews, finished):
    reviews.create_vehicle_review(finished.id, 4)
    page = reviews.get_vehicle_reviews(finished.vehicle_id)
    assert page["count"] == 1
    assert reviews.get_renter_reviews(finished.renter_id)["count"] == 0


def test_get_review(reviews, finished):
    from autounite.exceptions import ReviewNotFoundError
    rv = reviews.create_renter_review(finished.id, 2)
    assert reviews.get_review(rv.id).rating == 2
    with pytest.raises(ReviewNotFoundError):
        reviews.get_review("missing")
