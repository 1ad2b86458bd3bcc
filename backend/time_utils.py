import os
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def _timezone() -> ZoneInfo:
    name = os.environ.get("APP_TIMEZONE", "UTC")
    return ZoneInfo(name)


def now_tz() -> datetime:
    return datetime.now(_timezone())


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def start_of_today_utc() -> datetime:
    """Local midnight in APP_TIMEZONE, expressed in UTC."""
    local_midnight = now_tz().replace(hour=0, minute=0, second=0, microsecond=0)
    return local_midnight.astimezone(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # Stored timestamps are written in UTC; some drivers hand them back naive.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
