# autounite/utils/constants.py

"""
Global constants for roles, statuses and business rules.
These constants are imported by both models and services.
"""

from datetime import timedelta


class Role:
    RENTER = "RENTER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"


class UserStatus:
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class RentalStatus:
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CounterofferStatus:
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class VehicleStatus:
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class ReviewType:
    VEHICLE = "VEHICLE"
    RENTER = "RENTER"


class ReportStatus:
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class ReportSeverity:
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# Rentals that hold the vehicle's calendar
BLOCKING_RENTAL_STATES = {RentalStatus.PENDING, RentalStatus.ACTIVE}
TERMINAL_RENTAL_STATES = {RentalStatus.COMPLETED, RentalStatus.CANCELLED}

# --- Pricing ---
LOYALTY_DISCOUNT_PERCENTAGE = 10
LOYALTY_MIN_RATING = 4.7
LATE_RETURN_SURCHARGE_PERCENTAGE = 15
MIN_COUNTEROFFER_AMOUNT = 10

# --- Penalties ---
LATE_RETURN_GRACE = timedelta(minutes=30)
LATE_RETURN_BLOCK_DAYS = 4
REPORT_PENALTY_BLOCK_DAYS = 7

# --- Vehicles ---
VEHICLE_COOLDOWN = timedelta(hours=24)
MIN_RATING = 1.0
MAX_RATING = 5.0
DEFAULT_RATING = 5.0

# --- Misc ---
VERIFICATION_CODE_DIGITS = 6
REMINDER_WINDOW = timedelta(hours=24)
DEFAULT_PAGE_SIZE = 10
