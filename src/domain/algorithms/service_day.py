from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo


def local_now(tz: ZoneInfo, now: datetime | None = None) -> datetime:
    """Return `now` (or the current instant) as wall-clock time in `tz`."""

    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def seconds_since_midnight(dt: datetime) -> int:
    # Treat provided datetime as local service time.
    return dt.hour * 3600 + dt.minute * 60 + dt.second


def local_midnight_timestamp(dt: datetime) -> int:
    """Epoch seconds of 00:00 on dt's local calendar date."""

    midnight = datetime.combine(dt.date(), time(0, 0, 0), tzinfo=dt.tzinfo)
    return int(midnight.timestamp())


def service_date(dt: datetime) -> str:
    return format_service_date(dt.date())


def format_service_date(d: date) -> str:
    return d.strftime("%Y%m%d")
