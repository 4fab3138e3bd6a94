"""Shared service helpers and factories."""

import math
import secrets
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from autounite.exceptions import InvalidArgumentError
from autounite.models.store import Store
from autounite.utils.calc import days_between, round2  # noqa: F401
from autounite.utils.clock import SystemClock
from autounite.utils.constants import DEFAULT_PAGE_SIZE, VERIFICATION_CODE_DIGITS


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def _clock():
    """Wrapper for easier testing/mocking."""
    return SystemClock()


def _notifier():
    """Default notification collaborator bound to the current store."""
    from autounite.services.notification_service import NotificationService
    return NotificationService()


# -------- ids & codes --------
def new_id() -> str:
    return str(uuid.uuid4())


def generate_verification_code() -> str:
    """Random 6-digit code with no leading zero, e.g. '482913'."""
    low = 10 ** (VERIFICATION_CODE_DIGITS - 1)
    return str(low + secrets.randbelow(9 * low))


# -------- date helpers --------
def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value, field: str = "date") -> datetime:
    """
    Coerce a date-like value into an aware UTC datetime.
    Accepts datetime, date (midnight UTC), 'YYYY-MM-DD' or full ISO strings (with 'Z' or offsets).
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(s))
        except ValueError:
            pass
    raise InvalidArgumentError(f"Invalid {field}: {value!r}")


# -------- pagination --------
def paginate(items: list, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
    """Slice an already-sorted list into one page."""
    try:
        page = max(1, int(page))
        limit = max(1, int(limit))
    except (TypeError, ValueError):
        raise InvalidArgumentError("page and limit must be positive integers")
    count = len(items)
    offset = (page - 1) * limit
    return {
        "items": items[offset:offset + limit],
        "count": count,
        "total_pages": math.ceil(count / limit),
        "page": page,
    }


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
