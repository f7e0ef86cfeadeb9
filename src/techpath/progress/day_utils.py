"""Calendar-day utilities for streaks and time-of-day trophies.

All day boundaries are taken in one server-side zone (``activity_timezone``),
never from wall-clock deltas: 23:59 and 00:01 on the next day are two
different activity days.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from techpath.config import get_settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def activity_zone(name: str | None = None) -> ZoneInfo:
    """Zone used for activity days; defaults to the configured one."""
    return ZoneInfo(name or get_settings().activity_timezone)


def activity_day(moment: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar day of ``moment`` in the activity zone."""
    return as_utc(moment).astimezone(tz or activity_zone()).date()


def local_hour(moment: datetime, tz: ZoneInfo | None = None) -> int:
    """Hour of day (0-23) of ``moment`` in the activity zone."""
    return as_utc(moment).astimezone(tz or activity_zone()).hour


def today(tz: ZoneInfo | None = None) -> date:
    """Server-assigned current activity day."""
    return activity_day(utc_now(), tz)
