import calendar
from datetime import date, datetime


def now_local() -> datetime:
    """Current server-local time (naive)."""
    return datetime.now()


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive server-local time; naive input is returned as is."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def local_day(value: datetime) -> date:
    """Calendar day a timestamp falls on, in server-local time."""
    return to_local_naive(value).date()


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's length."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
