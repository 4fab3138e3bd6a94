"""Time source injected into services so lifecycle rules stay deterministic under test."""

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock time, always timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
