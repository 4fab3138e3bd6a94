"""
Rental entity: derived pricing, duration rounding and legal transitions.
"""
from datetime import timedelta

import pytest

from autounite.exceptions import InvalidArgumentError, InvalidDateRangeError, InvalidStateError
from autounite.models.rental import Rental
from autounite.utils.constants import CounterofferStatus, RentalStatus
from conftest import NOW, at


def make_rental(start=None, end=None, base_price=300.0, **kw):
    return Rental(
        id="r1",
        vehicle_id="v1",
        renter_id="u1",
        owner_id="o1",
        start_date=start or at(days=1),
        end_date=end or at(days=4),
        base_price=base_price,
        verification_code="123456",
        created_at=NOW,
        **kw,
    )


def test_duration_rounds_partial_days_up():
    r = make_rental(start=at(days=1), end=at(days=3, hours=1))
    assert r.rental_duration == 3


def test_exact_days_are_not_rounded_up():
    r = make_rental(start=at(days=1), end=at(days=4))
    assert r.rental_duration == 3


def test_final_price_without_adjustments():
    assert make_rental(base_price=300.0).final_price == 300.0


def test_discount_then_surcharge():
    r = make_rental(base_price=300.0, discount_percentage=10, additional_charge_percentage=15)
    # 300 * 0.9 * 1.15
    assert r.final_price == 310.5


def test_final_price_rounds_half_up():
    r = make_rental(base_price=100.05, discount_percentage=50)
    assert r.final_price == 50.03


def test_start_must_precede_end():
    with pytest.raises(InvalidDateRangeError):
        make_rental(start=at(days=2), end=at(days=2))


def test_missing_dates_rejected():
    with pytest.raises(InvalidArgumentError):
        Rental(id="r", vehicle_id="v", renter_id="u", owner_id="o", start_date=None, end_date=at(days=1),
               base_price=10, verification_code="1", created_at=NOW)


def test_wrong_code_changes_nothing():
    r = make_rental()
    assert r.verify_payment("000000") is False
    assert r.status == RentalStatus.PENDING
    assert r.payment_verified is False


def test_right_code_activates():
    r = make_rental()
    assert r.verify_payment("123456") is True
    assert r.is_active() and r.payment_verified


@pytest.mark.parametrize("finish", ["complete", "cancel"])
def test_terminal_rentals_refuse_transitions(finish):
    r = make_rental()
    r.verify_payment("123456")
    if finish == "complete":
        r.complete_rental(r.end_date)
    else:
        r.cancel_rental()

    with pytest.raises(InvalidStateError):
        r.verify_payment("123456")
    with pytest.raises(InvalidStateError):
        r.cancel_rental()
    with pytest.raises(InvalidStateError):
        r.extend_rental(r.end_date + timedelta(days=1))


def test_extension_keeps_daily_rate():
    r = make_rental(start=at(days=1), end=at(days=4), base_price=300.0, discount_percentage=10)
    r.verify_payment("123456")
    old_end = r.end_date

    r.extend_rental(at(days=6))

    assert r.rental_duration == 5
    assert r.base_price == 500.0
    assert r.final_price == 450.0
    assert r.original_end_date == old_end


def test_extension_must_move_end_forward():
    r = make_rental()
    r.verify_payment("123456")
    with pytest.raises(InvalidDateRangeError):
        r.extend_rental(r.end_date)


def test_pending_rental_cannot_be_extended():
    with pytest.raises(InvalidStateError):
        make_rental().extend_rental(at(days=10))


def test_return_within_grace_is_on_time():
    r = make_rental()
    r.verify_payment("123456")
    r.complete_rental(r.end_date + timedelta(minutes=30))
    assert r.is_completed()
    assert r.is_late_return is False


def test_return_after_grace_is_late():
    r = make_rental()
    r.verify_payment("123456")
    r.complete_rental(r.end_date + timedelta(minutes=31))
    assert r.is_late_return is True


def test_accepted_counteroffer_overrides_price():
    r = make_rental(base_price=300.0, discount_percentage=10)
    r.submit_counteroffer(200.0)
    assert r.has_pending_counteroffer()
    assert r.final_price == 270.0

    r.accept_counteroffer()
    assert r.counteroffer_status == CounterofferStatus.ACCEPTED
    assert r.final_price == 200.0


@pytest.mark.parametrize("amount", [float("nan"), float("inf")])
def test_non_finite_counteroffer_rejected(amount):
    r = make_rental(base_price=300.0)
    with pytest.raises(InvalidArgumentError):
        r.submit_counteroffer(amount)
    assert r.counteroffer_amount is None
    assert r.final_price == 300.0


def test_rejected_counteroffer_clears_amount():
    r = make_rental(base_price=300.0)
    r.submit_counteroffer(200.0)
    r.reject_counteroffer()
    assert r.counteroffer_status == CounterofferStatus.REJECTED
    assert r.counteroffer_amount is None
    assert r.final_price == 300.0


def test_accepted_counteroffer_survives_extension():
    r = make_rental(base_price=300.0)
    r.submit_counteroffer(250.0)
    r.accept_counteroffer()
    r.verify_payment("123456")

    r.extend_rental(r.end_date + timedelta(days=2))

    assert r.base_price == 500.0
    assert r.final_price == 250.0


def test_code_only_shown_on_request():
    r = make_rental()
    assert "verification_code" not in r.to_dict()
    assert r.to_dict(include_code=True)["verification_code"] == "123456"


# ---------- worked examples ----------
def test_ten_percent_off_one_hundred():
    assert make_rental(base_price=100.0, discount_percentage=10).final_price == 90.0


def test_five_day_booking_for_loyal_renter():
    from datetime import datetime, timezone
    start = datetime(2030, 6, 15, tzinfo=timezone.utc)
    end = datetime(2030, 6, 20, tzinfo=timezone.utc)
    r = make_rental(start=start, end=end, base_price=round(150.50 * 5, 2), discount_percentage=10)
    assert r.rental_duration == 5
    assert r.base_price == 752.50
    assert r.final_price == 677.25


def test_extend_five_days_to_seven():
    r = make_rental(start=at(days=1), end=at(days=6), base_price=750.0)
    r.verify_payment("123456")
    r.extend_rental(at(days=8))
    assert r.base_price == 1050.0


def test_return_29_minutes_after_end_is_on_time():
    r = make_rental()
    r.verify_payment("123456")
    r.complete_rental(r.end_date + timedelta(minutes=29))
    assert r.is_late_return is False
