"""Date-only value handling shared by the conflict detector and slot generator.

Schedules are calendar dates with no time of day. Everything entering the
core goes through :func:`parse_date`, which never applies a timezone
conversion: an ISO timestamp contributes its written date part and nothing
else, so ``2025-06-01T23:30:00-07:00`` is June 1st on every server.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from functools import lru_cache

from bayplanner.scheduling.errors import ValidationError

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[T ])")
_US_FORMAT = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Fixed-date holidays; observed on Friday/Monday when they fall on a weekend
FIXED_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "New Year's Day",
    (7, 4): "Independence Day",
    (11, 11): "Veterans Day",
    (12, 25): "Christmas Day",
}

# (month, weekday with Monday=0, nth occurrence or -1 for last, name)
FLOATING_HOLIDAYS: list[tuple[int, int, int, str]] = [
    (1, 0, 3, "Martin Luther King Jr. Day"),
    (2, 0, 3, "Presidents' Day"),
    (5, 0, -1, "Memorial Day"),
    (9, 0, 1, "Labor Day"),
    (10, 0, 2, "Columbus Day"),
    (11, 3, 4, "Thanksgiving"),
]


def parse_date(value: object, field_name: str = "date") -> date:
    """Coerce ``value`` to a calendar date.

    Accepts ``date``, ``datetime`` (time dropped as-is), ``YYYY-MM-DD``,
    an ISO timestamp, or ``MM/DD/YYYY``. Raises ValidationError otherwise.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")

    text = value.strip()
    try:
        match = _ISO_PREFIX.match(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)
        match = _US_FORMAT.match(text)
        if match:
            month, day, year = (int(g) for g in match.groups())
            return date(year, month, day)
    except ValueError as exc:
        raise ValidationError(f"{field_name} {text!r} is not a valid calendar date") from exc

    raise ValidationError(f"{field_name} {text!r} is not an ISO-8601 date")


def format_date(value: date) -> str:
    """Render a date as ``YYYY-MM-DD``."""
    return value.isoformat()


def start_of_week(value: date) -> date:
    """Monday on or before ``value``."""
    return value - timedelta(days=value.weekday())


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def days_in_month(value: date) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_date(value: date, delta: timedelta | int, field_name: str = "date") -> date:
    """``value`` moved by ``delta`` (whole days when an int).

    Raises ValidationError when the result falls outside the calendar.
    """
    try:
        if not isinstance(delta, timedelta):
            delta = timedelta(days=delta)
        return value + delta
    except OverflowError as exc:
        raise ValidationError(f"{field_name} is outside the supported date range") from exc


def iter_days(start: date, end: date):
    """Yield each date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    if n < 0:
        last = date(year, month, calendar.monthrange(year, month)[1])
        return last - timedelta(days=(last.weekday() - weekday) % 7)
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


@lru_cache(maxsize=64)
def us_holidays(year: int) -> dict[date, str]:
    """Observed US federal holidays used for working-day counts."""
    holidays: dict[date, str] = {}
    for (month, day), name in FIXED_HOLIDAYS.items():
        observed = date(year, month, day)
        if observed.weekday() == 6:
            observed += timedelta(days=1)
        elif observed.weekday() == 5:
            observed -= timedelta(days=1)
        holidays[observed] = name
    for month, weekday, n, name in FLOATING_HOLIDAYS:
        holidays[_nth_weekday(year, month, weekday, n)] = name
    return holidays


def is_working_day(value: date) -> bool:
    return value.weekday() < 5 and value not in us_holidays(value.year)


def count_working_days(start: object, end: object) -> int | None:
    """Count Monday-Friday non-holiday dates in ``[start, end]``.

    Returns None when either bound is missing or start is after end.
    """
    if start is None or end is None:
        return None
    start_d = parse_date(start, "start_date")
    end_d = parse_date(end, "end_date")
    if start_d > end_d:
        return None
    return sum(1 for day in iter_days(start_d, end_d) if is_working_day(day))
