import os
import pathlib
import sys
from datetime import datetime, timedelta, timezone

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from autounite import create_app
from autounite.models.store import Store
from autounite.models.user import User
from autounite.models.vehicle import Vehicle
from autounite.services.notification_service import NotificationService
from autounite.services.rental_service import RentalService
from autounite.utils.constants import Role, UserStatus, VehicleStatus
from autounite.utils.security import generate_hash

NOW = datetime(2030, 3, 10, 9, 0, tzinfo=timezone.utc)
PASSWORD = "Secret123"


class FrozenClock:
    def __init__(self, now=NOW):
        self.current = now

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class RecordingSender:
    """Collects outbound messages instead of delivering them."""

    def __init__(self):
        self.sent = []

    def send(self, user, title, message):
        self.sent.append((user.id, title, message))

    def titles_for(self, user_id):
        return [t for uid, t, _ in self.sent if uid == user_id]


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def store(tmp_path):
    return Store(tmp_path / "data.pkl")


@pytest.fixture
def notifier(store, sender, clock):
    return NotificationService(store=store, sender=sender, clock=clock)


@pytest.fixture(autouse=True)
def unified_store(monkeypatch, store, clock, notifier):
    """
    Make common._store() / _clock() / _notifier() hand out the SAME test
    objects, so services built without arguments (controllers) share them.
    """
    from autounite.services import common as common_mod

    monkeypatch.setattr(common_mod, "_store", lambda: store, raising=True)
    monkeypatch.setattr(common_mod, "_clock", lambda: clock, raising=True)
    monkeypatch.setattr(common_mod, "_notifier", lambda: notifier, raising=True)
    yield store


@pytest.fixture
def rentals(store, notifier, clock):
    return RentalService(store=store, notifier=notifier, clock=clock)


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "SECRET_KEY": "test"})
    with app.test_client() as c:
        yield c


# ---------- builders ----------
_counter = {"n": 0}


def _next():
    _counter["n"] += 1
    return _counter["n"]


def put_user(store, role=Role.RENTER, **kw):
    n = _next()
    user = User(
        id=kw.pop("id", f"{role.lower()}-{n}"),
        email=kw.pop("email", f"{role.lower()}{n}@example.com"),
        password_hash=generate_hash(PASSWORD),
        first_name=kw.pop("first_name", role.title()),
        last_name=kw.pop("last_name", str(n)),
        role=role,
        status=UserStatus.VERIFIED,
        created_at=NOW - timedelta(days=30),
        **kw,
    )
    return store.save_user(user)


def put_vehicle(store, owner, daily_rate=100.0, **kw):
    n = _next()
    vehicle = Vehicle(
        id=kw.pop("id", f"veh-{n}"),
        owner_id=owner.id,
        brand=kw.pop("brand", "Toyota"),
        model=kw.pop("model", "Corolla"),
        license_plate=kw.pop("license_plate", f"PLT-{n:03d}"),
        daily_rate=daily_rate,
        status=kw.pop("status", VehicleStatus.VERIFIED),
        is_available=kw.pop("is_available", True),
        created_at=NOW - timedelta(days=30),
        **kw,
    )
    return store.save_vehicle(vehicle)


def at(days=0, hours=0, minutes=0):
    """A moment relative to the frozen clock."""
    return NOW + timedelta(days=days, hours=hours, minutes=minutes)


@pytest.fixture
def parties(store):
    """A verified owner with one rentable vehicle, and a renter in good standing."""
    owner = put_user(store, Role.OWNER)
    renter = put_user(store, Role.RENTER, rating=4.0)
    vehicle = put_vehicle(store, owner)
    return owner, renter, vehicle
