"""
Wall-clock and local-day helpers.

Every "today" in the rewards rules (daily review cap, streak days, visit_day,
competition weeks) is a calendar day in settings.TIMEZONE. Timestamps are
stored in UTC.
"""
from datetime import date, datetime, time, timedelta, timezone

from dishdisplay.core.config import settings


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day(value: datetime) -> date:
    return as_utc(value).astimezone(settings.tz).date()


def local_today(now: datetime | None = None) -> date:
    return local_day(now or utc_now())


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of a local calendar day, as UTC datetimes."""
    start = datetime.combine(day, time.min, tzinfo=settings.tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=settings.tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
