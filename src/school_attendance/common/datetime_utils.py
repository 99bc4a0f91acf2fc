from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" cutoff string into a time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetime -> naive UTC, the form stored in DATETIME columns."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def last_n_school_days(n: int, today: date) -> list[date]:
    """The last ``n`` Monday-Friday dates up to and including ``today``, oldest first."""
    result: list[date] = []
    cursor = today
    while len(result) < n:
        if cursor.weekday() < 5:
            result.append(cursor)
        cursor -= timedelta(days=1)
    result.reverse()
    return result


def month_range(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def school_week_range(today: date) -> tuple[date, date]:
    """Monday to Friday of the week containing ``today``."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=4)


def month_to_date(today: date) -> tuple[date, date]:
    return today.replace(day=1), today
