import atexit
import copy
import logging
import os
import pickle
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from autounite.config import Config
from autounite.models.notification import Notification
from autounite.models.rental import Rental
from autounite.models.report import Report
from autounite.models.review import Review
from autounite.models.user import User
from autounite.models.vehicle import Vehicle
from autounite.utils.calc import overlaps_inclusive
from autounite.utils.constants import BLOCKING_RENTAL_STATES, Role

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "vehicles", "rentals", "reviews", "reports", "notifications")


class Store:
    """
    Pickle-backed persistence for every aggregate, keyed by id.

    Writers are serialised by a re-entrant lock. `transaction()` is the unit of
    work: it snapshots all collections, restores them if the block raises, and
    writes the file once when the block completes.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path or Config.DATA_PATH)
        self.users: dict[str, User] = {}
        self.vehicles: dict[str, Vehicle] = {}
        self.rentals: dict[str, Rental] = {}
        self.reviews: dict[str, Review] = {}
        self.reports: dict[str, Report] = {}
        self.notifications: dict[str, Notification] = {}
        self._rw = threading.RLock()
        self._tx_depth = 0

        logger.info("Using store file %s", self.path)
        self._load()

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
                # Automatically save on exit (skipped in test environments)
                if not cls._atexit_registered and os.getenv("APP_ENV") != "test":
                    atexit.register(cls._inst.save)
                    cls._atexit_registered = True
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError, AttributeError, ImportError) as e:
            logger.warning("Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            for name in COLLECTIONS:
                setattr(self, name, data.get(name, {}) or {})
            logger.info(
                "Loaded: users=%d, vehicles=%d, rentals=%d",
                len(self.users), len(self.vehicles), len(self.rentals),
            )
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            os.replace(self.path, bak)
            logger.warning("Incompatible store (%s); backed up to %s. Starting empty.", type(data).__name__, bak)

    def _collections(self) -> dict:
        return {name: getattr(self, name) for name in COLLECTIONS}

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "wb") as f:
            pickle.dump(self._collections(), f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def _commit(self):
        """Persist now unless a transaction will do it on exit."""
        if self._tx_depth == 0:
            self._dump()

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.debug("Saving to %s", self.path)
            self._dump()

    def clear(self):
        with self._rw:
            for name in COLLECTIONS:
                getattr(self, name).clear()
            self._commit()

    @contextmanager
    def transaction(self):
        """
        All-or-nothing block over every collection.
        Nested blocks join the outer one; only the outermost writes to disk.
        """
        with self._rw:
            snapshot = copy.deepcopy(self._collections())
            self._tx_depth += 1
            try:
                yield self
            except BaseException:
                for name, items in snapshot.items():
                    setattr(self, name, items)
                logger.debug("Transaction rolled back")
                raise
            finally:
                self._tx_depth -= 1
            self._commit()

    def _put(self, collection: dict, obj):
        with self._rw:
            collection[obj.id] = obj
            self._commit()
            return obj

    # ---------- Users ----------
    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def save_user(self, user: User) -> User:
        return self._put(self.users, user)

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = (email or "").strip().lower()
        for u in self.users.values():
            if u.email.lower() == email:
                return u
        return None

    def find_admins(self) -> list[User]:
        return [u for u in self.users.values() if u.role == Role.ADMIN]

    # ---------- Vehicles ----------
    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        """Soft-deleted vehicles are invisible to lookups."""
        v = self.vehicles.get(str(vehicle_id))
        if v is None or v.is_deleted():
            return None
        return v

    def save_vehicle(self, vehicle: Vehicle) -> Vehicle:
        return self._put(self.vehicles, vehicle)

    def find_vehicle_by_plate(self, license_plate: str) -> Optional[Vehicle]:
        plate = (license_plate or "").strip().upper()
        for v in self.vehicles.values():
            if not v.is_deleted() and v.license_plate.upper() == plate:
                return v
        return None

    def find_vehicles_by_owner(self, owner_id: str) -> list[Vehicle]:
        res = [v for v in self.vehicles.values() if v.owner_id == owner_id and not v.is_deleted()]
        res.sort(key=lambda v: v.created_at, reverse=True)
        return res

    # ---------- Rentals ----------
    def get_rental(self, rental_id: str) -> Optional[Rental]:
        return self.rentals.get(rental_id)

    def save_rental(self, rental: Rental) -> Rental:
        return self._put(self.rentals, rental)

    def find_active_rentals_by_vehicle(self, vehicle_id: str) -> list[Rental]:
        """PENDING or ACTIVE rentals, i.e. the ones holding the vehicle's calendar."""
        res = [
            r for r in self.rentals.values()
            if r.vehicle_id == vehicle_id and r.status in BLOCKING_RENTAL_STATES
        ]
        res.sort(key=lambda r: r.start_date)
        return res

    def find_rentals_by_vehicle_and_date_range(self, vehicle_id: str, start: datetime, end: datetime) -> list[Rental]:
        return [
            r for r in self.find_active_rentals_by_vehicle(vehicle_id)
            if overlaps_inclusive(r.start_date, r.end_date, start, end)
        ]

    def find_rentals_by_user(self, user_id: str, role: Optional[str] = None, status: Optional[str] = None) -> list[Rental]:
        """
        Rentals where the user is the renter ('renter'), the owner ('owner'),
        or either (role=None). Newest first.
        """
        res = []
        for r in self.rentals.values():
            if role == "renter":
                match = r.renter_id == user_id
            elif role == "owner":
                match = r.owner_id == user_id
            else:
                match = r.involves(user_id)
            if not match:
                continue
            if status and r.status != status:
                continue
            res.append(r)
        res.sort(key=lambda r: r.created_at, reverse=True)
        return res

    def find_rentals_by_status(self, status: str) -> list[Rental]:
        return [r for r in self.rentals.values() if r.status == status]

    # ---------- Reviews ----------
    def get_review(self, review_id: str) -> Optional[Review]:
        return self.reviews.get(review_id)

    def save_review(self, review: Review) -> Review:
        return self._put(self.reviews, review)

    def find_review(self, rental_id: str, review_type: str) -> Optional[Review]:
        for rv in self.reviews.values():
            if rv.rental_id == rental_id and rv.type == review_type:
                return rv
        return None

    def find_reviews(self, review_type: str, *, vehicle_id: Optional[str] = None,
                     renter_id: Optional[str] = None) -> list[Review]:
        res = [rv for rv in self.reviews.values() if rv.type == review_type]
        if vehicle_id is not None:
            res = [rv for rv in res if rv.vehicle_id == vehicle_id]
        if renter_id is not None:
            res = [rv for rv in res if rv.renter_id == renter_id]
        res.sort(key=lambda rv: rv.created_at, reverse=True)
        return res

    # ---------- Reports ----------
    def get_report(self, report_id: str) -> Optional[Report]:
        return self.reports.get(report_id)

    def save_report(self, report: Report) -> Report:
        return self._put(self.reports, report)

    def find_report_by_rental(self, rental_id: str) -> Optional[Report]:
        for rp in self.reports.values():
            if rp.rental_id == rental_id:
                return rp
        return None

    def find_reports(self, *, owner_id: Optional[str] = None, status: Optional[str] = None) -> list[Report]:
        res = list(self.reports.values())
        if owner_id is not None:
            res = [rp for rp in res if rp.owner_id == owner_id]
        if status:
            res = [rp for rp in res if rp.status == status]
        res.sort(key=lambda rp: rp.created_at, reverse=True)
        return res

    # ---------- Notifications ----------
    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return self.notifications.get(notification_id)

    def save_notification(self, notification: Notification) -> Notification:
        return self._put(self.notifications, notification)

    def delete_notification(self, notification_id: str) -> bool:
        with self._rw:
            if notification_id in self.notifications:
                del self.notifications[notification_id]
                self._commit()
                return True
            return False

    def find_notifications_by_user(self, user_id: str, only_unread: bool = False) -> list[Notification]:
        res = [n for n in self.notifications.values() if n.user_id == user_id]
        if only_unread:
            res = [n for n in res if not n.is_read]
        res.sort(key=lambda n: n.created_at, reverse=True)
        return res

