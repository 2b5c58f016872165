from datetime import datetime, date, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from healthtrack.config import settings


def now_local(tz: ZoneInfo = None) -> datetime:
    return datetime.now(tz or settings.tz)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we write is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_window(now: datetime, tz: ZoneInfo = None) -> Tuple[datetime, datetime]:
    """
    [start, end) of the calendar day containing `now`, as UTC datetimes.
    Midnight is taken in the configured zone, so a DST day can be 23 or 25 hours.
    """
    tz = tz or settings.tz
    today = now.astimezone(tz).date()
    start = datetime.combine(today, time.min, tzinfo=tz)
    end = datetime.combine(today + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def wall_clock(day: date, hhmm: str, tz: ZoneInfo = None) -> datetime:
    hour, minute = (int(part) for part in hhmm.split(":"))
    return datetime.combine(day, time(hour, minute), tzinfo=tz or settings.tz)
