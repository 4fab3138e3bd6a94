import logging

from autounite import create_app
from autounite.models.store import Store
from autounite.services.user_service import UserService
from autounite.services.vehicle_service import VehicleService
from autounite.utils.constants import Role

logger = logging.getLogger("seeds")


def ensure_user(service: UserService, store: Store, email: str, password: str, first: str, last: str, role: str):
    """
    Ensure a user with `email` exists in the store.
    - If exists: leave it alone (idempotent).
    - If not:   register it. Admins cannot self-register, so the role is set afterwards.
    """
    user = store.find_user_by_email(email)
    if user:
        return user
    user = service.register_user(email, password, first, last, role=Role.RENTER if role == Role.ADMIN else role)
    if role == Role.ADMIN:
        user.role = Role.ADMIN
        store.save_user(user)
    return service.verify_user(user.id)


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()
        users = UserService(store=store)
        vehicles = VehicleService(store=store)

        # ---- Admin / Owner / Renter demo accounts ----
        ensure_user(users, store, "admin@autounite.pe", "Admin123", "Ada", "Admin", Role.ADMIN)
        owner = ensure_user(users, store, "owner@autounite.pe", "Owner123", "Oscar", "Owner", Role.OWNER)
        ensure_user(users, store, "renter@autounite.pe", "Renter123", "Rita", "Renter", Role.RENTER)

        # ---- Demo vehicles (create only if the owner has none) ----
        if not store.find_vehicles_by_owner(owner.id):
            for payload in (
                {"brand": "Toyota", "model": "Corolla", "license_plate": "ABC-123", "daily_rate": 45, "seats": 5},
                {"brand": "Honda", "model": "Civic", "license_plate": "DEF-456", "daily_rate": 50, "seats": 5},
                {"brand": "Hyundai", "model": "H-1", "license_plate": "GHI-789", "daily_rate": 95, "seats": 12},
            ):
                v = vehicles.create_vehicle(owner.id, payload)
                vehicles.verify_vehicle(v.id)

        store.save()

        logger.info("Seed complete.")
        logger.info("Admin login:  admin@autounite.pe / Admin123")
        logger.info("Owner login:  owner@autounite.pe / Owner123")
        logger.info("Renter login: renter@autounite.pe / Renter123")


if __name__ == "__main__":
    main()
