"""Calendar-day helpers. All days are ISO `YYYY-MM-DD` strings."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def iso_day(value: date | str) -> str:
    """Normalize a date or ISO string to `YYYY-MM-DD`."""
    if isinstance(value, date):
        return value.isoformat()
    return value


def parse_day(value: str) -> date | None:
    """Parse an ISO day, or None when malformed."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def add_days(day: date | str, days: int) -> str:
    return (date.fromisoformat(iso_day(day)) + timedelta(days=days)).isoformat()


def previous_day(day: date | str) -> str:
    return add_days(day, -1)


def weekday_sunday_first(day: date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def week_start(day: date | str) -> str:
    """Monday of the week containing `day`."""
    d = date.fromisoformat(iso_day(day))
    return (d - timedelta(days=d.weekday())).isoformat()


def week_days(day: date | str) -> list[str]:
    """The seven days (Monday first) of the week containing `day`."""
    start = date.fromisoformat(week_start(day))
    return [(start + timedelta(days=i)).isoformat() for i in range(7)]


def days_between(start: date | str, end: date | str) -> list[str]:
    """Inclusive list of days from start to end (empty if end < start)."""
    s = date.fromisoformat(iso_day(start))
    e = date.fromisoformat(iso_day(end))
    return [(s + timedelta(days=i)).isoformat() for i in range((e - s).days + 1)]


def today_in(tz_name: str, now: datetime | None = None) -> str:
    """Current civil day in the given timezone. Only called outside the core."""
    now = now or datetime.now(ZoneInfo(tz_name))
    return now.astimezone(ZoneInfo(tz_name)).date().isoformat()
