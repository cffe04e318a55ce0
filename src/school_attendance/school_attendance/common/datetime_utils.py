from __future__ import annotations

from datetime import date, datetime


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def at_time_of(day: date, template: datetime) -> datetime:
    """Place ``template``'s time-of-day on ``day`` (seconds dropped)."""
    return datetime(day.year, day.month, day.day, template.hour, template.minute, tzinfo=template.tzinfo)
