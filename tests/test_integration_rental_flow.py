"""
End-to-end HTTP flow with two browsers: the owner lists a vehicle, an admin
verifies it, the renter books, pays, extends and returns it, then both review.
"""
from autounite.utils.constants import Role
from conftest import PASSWORD, at, put_user

ALLOWED = (200, 201)


def _assert_ok(resp, step: str):
    """Helper: assert response code is acceptable."""
    assert resp.status_code in ALLOWED, f"{step} failed: {resp.status_code}\n{resp.data[:300]}"
    return resp.get_json()


def _login(client, user):
    _assert_ok(client.post("/auth/login", json={"email": user.email, "password": PASSWORD}), "login")


def test_full_rental_flow(client, store, clock, sender):
    from autounite import create_app

    owner = put_user(store, Role.OWNER)
    renter = put_user(store, Role.RENTER, rating=4.9)
    admin = put_user(store, Role.ADMIN)

    app = create_app({"TESTING": True, "SECRET_KEY": "test"})
    owner_c, admin_c = app.test_client(), app.test_client()
    _login(owner_c, owner)
    _login(admin_c, admin)
    _login(client, renter)

    v = _assert_ok(owner_c.post("/vehicles", json={
        "brand": "Kia", "model": "Rio", "license_plate": "KIA-001", "daily_rate": 80,
    }), "create vehicle")
    assert client.post("/rentals", json={
        "vehicle_id": v["id"], "start_date": at(days=1).isoformat(), "end_date": at(days=3).isoformat(),
    }).status_code == 400  # not verified yet
    _assert_ok(admin_c.post(f"/staff/vehicles/{v['id']}/verify"), "verify vehicle")

    rental = _assert_ok(client.post("/rentals", json={
        "vehicle_id": v["id"], "start_date": at(days=1).isoformat(), "end_date": at(days=3).isoformat(),
    }), "book")
    assert rental["final_price"] == 144.0  # 2 days * 80, 10% loyalty discount
    code = rental["verification_code"]

    seen_by_owner = _assert_ok(owner_c.get(f"/rentals/{rental['id']}"), "owner view")
    assert "verification_code" not in seen_by_owner

    # Only the owner may confirm payment
    assert client.post(f"/rentals/{rental['id']}/verify-payment", json={"verification_code": code}).status_code == 403
    bad = owner_c.post(f"/rentals/{rental['id']}/verify-payment", json={"verification_code": "nope"})
    assert bad.status_code == 400 and bad.get_json()["error"] == "invalid_argument"
    active = _assert_ok(owner_c.post(f"/rentals/{rental['id']}/verify-payment", json={"verification_code": code}),
                        "verify payment")
    assert active["status"] == "ACTIVE"

    extended = _assert_ok(client.post(f"/rentals/{rental['id']}/extend", json={"end_date": at(days=4).isoformat()}),
                          "extend")
    assert extended["rental_duration"] == 3

    clock.advance(days=4)
    done = _assert_ok(owner_c.post(f"/rentals/{rental['id']}/complete"), "complete")
    assert done["status"] == "COMPLETED" and done["is_late_return"] is False

    _assert_ok(client.post("/reviews/vehicle", json={"rental_id": rental["id"], "rating": 4}), "vehicle review")
    _assert_ok(owner_c.post("/reviews/renter", json={"rental_id": rental["id"], "rating": 5}), "renter review")
    assert _assert_ok(client.get(f"/vehicles/{v['id']}"), "vehicle")["rating"] == 4.0

    inbox = _assert_ok(client.get("/notifications?unread=1"), "inbox")
    assert inbox["count"] >= 4
    _assert_ok(client.post("/notifications/read-all"), "read all")
    assert _assert_ok(client.get("/notifications/unread-count"), "count")["unread"] == 0


def test_cancel_and_list(client, store, rentals, parties):
    _, renter, vehicle = parties
    _login(client, renter)

    created = _assert_ok(client.post("/rentals", json={
        "vehicle_id": vehicle.id, "start_date": at(days=1).isoformat(), "end_date": at(days=2).isoformat(),
    }), "book")
    _assert_ok(client.post(f"/rentals/{created['id']}/cancel"), "cancel")

    mine = _assert_ok(client.get("/rentals?role=renter&status=cancelled"), "list")
    assert [r["id"] for r in mine["items"]] == [created["id"]]

    again = client.post(f"/rentals/{created['id']}/cancel")
    assert again.status_code == 400 and again.get_json()["error"] == "invalid_state"


def test_invalid_date_is_400(client, parties):
    _, renter, vehicle = parties
    _login(client, renter)
    r = client.post("/rentals", json={"vehicle_id": vehicle.id, "start_date": "tomorrow", "end_date": "2030-01-01"})
    assert r.status_code == 400


def test_non_finite_counteroffer_is_400(client, store, parties):
    _, renter, vehicle = parties
    _login(client, renter)
    created = _assert_ok(client.post("/rentals", json={
        "vehicle_id": vehicle.id, "start_date": at(days=1).isoformat(), "end_date": at(days=2).isoformat(),
    }), "book")

    for amount in ("nan", "inf", "-Infinity"):
        r = client.post(f"/rentals/{created['id']}/counteroffer", json={"amount": amount})
        assert r.status_code == 400 and r.get_json()["error"] == "invalid_argument"
    assert store.get_rental(created["id"]).counteroffer_amount is None

    booked = client.post("/rentals", json={
        "vehicle_id": vehicle.id, "start_date": at(days=5).isoformat(), "end_date": at(days=6).isoformat(),
        "counteroffer_amount": "nan",
    })
    assert booked.status_code == 400
