"""
Availability: PENDING and ACTIVE rentals block their inclusive date range,
finished ones never do.
"""
from autounite.models.rental import Rental
from autounite.services.availability import check_vehicle_availability
from autounite.utils.constants import RentalStatus
from conftest import NOW, at


def put_rental(store, rid, vehicle_id, start, end, status=RentalStatus.PENDING):
    r = Rental(
        id=rid, vehicle_id=vehicle_id, renter_id="u1", owner_id="o1",
        start_date=start, end_date=end, base_price=100.0,
        verification_code="111111", created_at=NOW, status=status,
    )
    return store.save_rental(r)


def test_free_when_no_rentals(store):
    res = check_vehicle_availability(store, "v1", at(days=1), at(days=3))
    assert res.is_available
    assert res.conflicting_dates == []


def test_overlap_rejected(store):
    put_rental(store, "r1", "v1", at(days=10), at(days=15))
    res = check_vehicle_availability(store, "v1", at(days=14), at(days=20))
    assert not res.is_available
    assert res.conflicting_dates == [(at(days=10), at(days=15))]


def test_enclosing_range_rejected(store):
    put_rental(store, "r1", "v1", at(days=10), at(days=12))
    assert not check_vehicle_availability(store, "v1", at(days=9), at(days=13)).is_available


def test_touching_boundary_conflicts(store):
    # The range is inclusive: a booking that starts the instant another ends still clashes.
    put_rental(store, "r1", "v1", at(days=10), at(days=15))
    assert not check_vehicle_availability(store, "v1", at(days=15), at(days=18)).is_available


def test_finished_rentals_do_not_block(store):
    put_rental(store, "r1", "v1", at(days=10), at(days=15), status=RentalStatus.COMPLETED)
    put_rental(store, "r2", "v1", at(days=10), at(days=15), status=RentalStatus.CANCELLED)
    assert check_vehicle_availability(store, "v1", at(days=11), at(days=12)).is_available


def test_other_vehicles_do_not_block(store):
    put_rental(store, "r1", "v2", at(days=10), at(days=15))
    assert check_vehicle_availability(store, "v1", at(days=11), at(days=12)).is_available


def test_excluded_rental_is_ignored(store):
    put_rental(store, "r1", "v1", at(days=10), at(days=15), status=RentalStatus.ACTIVE)
    assert check_vehicle_availability(store, "v1", at(days=15), at(days=17), exclude_rental_id="r1").is_available


def test_identical_range_conflicts(store):
    put_rental(store, "r1", "v1", at(days=1), at(days=5))
    assert not check_vehicle_availability(store, "v1", at(days=1), at(days=5)).is_available


def test_june_bookings():
    from datetime import datetime, timezone
    from autounite.utils.calc import overlaps_inclusive

    def d(day):
        return datetime(2030, 6, day, tzinfo=timezone.utc)

    assert overlaps_inclusive(d(1), d(5), d(4), d(8))
    assert not overlaps_inclusive(d(1), d(5), d(6), d(10))
    assert not overlaps_inclusive(d(6), d(10), d(1), d(5))
