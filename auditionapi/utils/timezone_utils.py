"""
Timezone helpers.

Check-in days and milestone windows are counted in the app's local time
(Vietnam, UTC+7), not in UTC.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from auditionapi.config import settings

LOCAL_TZ = timezone(timedelta(hours=settings.TIMEZONE_OFFSET_HOURS))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_local(dt: datetime) -> datetime:
    return ensure_aware(dt).astimezone(LOCAL_TZ)


def local_date(dt: Optional[datetime] = None) -> date:
    """Calendar date in local time for ``dt`` (default: now)."""
    return to_local(dt or utc_now()).date()


def is_previous_day(earlier: date, later: date) -> bool:
    return later - earlier == timedelta(days=1)
