from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


class ScheduleError(ValueError):
    """Input that the day arithmetic cannot work with."""


def today_local(tz_name: str, now: datetime | None = None) -> date:
    tz = ZoneInfo(tz_name)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def coerce_date(value: date | datetime | str, *, field: str = "date") -> date:
    """
    Accept a date, a datetime or an ISO string ('2025-01-04', '2025-01-04T12:00:00Z')
    and return the calendar date. Raises ScheduleError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ScheduleError(f"{field} must be YYYY-MM-DD")
    raw = value.strip()
    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return datetime.fromisoformat(raw).date()
    except ValueError as exc:
        raise ScheduleError(f"{field} must be YYYY-MM-DD") from exc


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month(day: date) -> date:
    first = month_start(day)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def previous_month(day: date) -> date:
    first = month_start(day)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def month_end(day: date) -> date:
    return next_month(day) - timedelta(days=1)


def days_between(start: date, end: date) -> int:
    return (end - start).days
