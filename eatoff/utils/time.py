from __future__ import annotations

from datetime import datetime, timezone


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def start_of_utc_day(moment: datetime | None = None) -> datetime:
    moment = as_utc(moment) or utc_now()
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
