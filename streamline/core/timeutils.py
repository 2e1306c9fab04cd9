"""
Timestamp helpers shared by timesheet and reporting endpoints.

Companies keep an IANA time zone; report date ranges arrive as calendar
dates in that zone and are converted here into UTC half-open windows.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from streamline.core.constants import FALLBACK_TIMEZONE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or FALLBACK_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(FALLBACK_TIMEZONE)


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def day_window(start: date, end: date, tz_name: str | None) -> tuple[datetime, datetime]:
    """UTC ``[start 00:00, end+1 00:00)`` for local calendar days, both inclusive."""
    zone = get_zone(tz_name)
    lo = datetime.combine(start, time.min, tzinfo=zone)
    hi = datetime.combine(end + timedelta(days=1), time.min, tzinfo=zone)
    return lo.astimezone(timezone.utc), hi.astimezone(timezone.utc)


def period_window(
    period: str, tz_name: str | None, now: datetime | None = None
) -> tuple[datetime, datetime]:
    """Window for ``today`` / ``week`` / ``month`` ending at *now*.

    Weeks start on Sunday, matching the mobile client's period picker.
    """
    zone = get_zone(tz_name)
    now = ensure_utc(now) or utcnow()
    local_today = now.astimezone(zone).date()

    if period == "today":
        start = local_today
    elif period == "week":
        start = local_today - timedelta(days=(local_today.weekday() + 1) % 7)
    elif period == "month":
        start = local_today.replace(day=1)
    else:
        raise ValueError(f"Unknown period: {period}")

    lo = datetime.combine(start, time.min, tzinfo=zone).astimezone(timezone.utc)
    return lo, now


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours, never negative."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return max(0.0, seconds) / 3600


def format_duration(hours: float) -> str:
    """``HH:MM:SS`` rendering of a fractional hour count."""
    total = int(round(hours * 3600))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"
