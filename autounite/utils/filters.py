"""Date formatting helpers for user-facing messages."""
from datetime import datetime, timezone
from typing import Optional

import pytz

from autounite.config import Config


def _to_datetime(value) -> Optional[datetime]:
    """Accept datetime objects or ISO strings ('YYYY-MM-DD', '...T...', 'Z' or offsets)."""
    if isinstance(value, datetime):
        return value
    s = str(value).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s.replace("T", " "))
    except ValueError:
        return None


def fmt_local(value, tz_name: Optional[str] = None, use_12h: bool = False, with_time: bool = True) -> str:
    """
    Format a datetime into the marketplace's local time (Config.TIMEZONE by default).
    Naive values are assumed to be UTC.
    On parse error, returns the original value (so a message never goes blank).
    """
    if value is None:
        return ""

    dt = _to_datetime(value)
    if dt is None:
        return str(value)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    local = dt.astimezone(pytz.timezone(tz_name or Config.TIMEZONE))

    if not with_time:
        return local.strftime("%d/%m/%Y")
    if use_12h:
        # Avoid %-I (not portable on Windows). Strip any leading zero manually.
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")


def fmt_money(amount: float, currency: str = "S/") -> str:
    return f"{currency} {amount:,.2f}"
