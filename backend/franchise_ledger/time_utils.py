from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """Current-time provider injected into services that need "now"."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock, UTC-naive."""

    def now(self) -> datetime:
        return utcnow()

    def today(self) -> date:
        return utcnow().date()


class FixedClock:
    """Clock pinned to a single instant. Used by tests and backfills."""

    def __init__(self, instant: datetime | date):
        if not isinstance(instant, datetime):
            instant = datetime(instant.year, instant.month, instant.day)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """Return the clock installed on the current app, falling back to the wall clock."""
    from flask import current_app, has_app_context

    if has_app_context():
        clock = current_app.extensions.get("ledger_clock")
        if clock is not None:
            return clock
    return SystemClock()


def parse_iso_date(value: Optional[str | date]) -> Optional[date]:
    """
    Parse a calendar date.

    - None / "" -> None
    - date / datetime -> date part
    - "YYYY-MM-DD" or a full ISO-8601 datetime string -> date part
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    if len(s) == 10:
        return date.fromisoformat(s)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s).date()


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by `offset` calendar months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def previous_month(year: int, month: int) -> tuple[int, int]:
    return shift_month(year, month, -1)


def to_iso_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
