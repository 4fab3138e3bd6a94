"""Money and date arithmetic shared by entities and services."""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP


def round2(x: float) -> float:
    """Round to cents, half away from zero (2.675 -> 2.68, not banker's rounding)."""
    return float(Decimal(str(float(x))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def days_between(start: datetime, end: datetime) -> int:
    """Whole days covered by [start, end), counting any partial day as a full one."""
    return math.ceil((end - start).total_seconds() / 86400)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def overlaps_inclusive(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Check overlap between closed ranges: existing [a_start, a_end] vs requested [b_start, b_end].
    Touching endpoints count as a conflict.
    """
    return (
        b_start <= a_start <= b_end
        or b_start <= a_end <= b_end
        or (a_start <= b_start and a_end >= b_end)
    )
