"""Timezone-aware calendar date arithmetic.

A stored date such as "2024-01-01" means local midnight in the user's
timezone. Day counts are always taken between calendar-date projections
in one timezone, never by subtracting instants: elapsed-seconds division
drifts across DST transitions and when an instant recorded in one zone is
observed in another.
"""

import re
from datetime import UTC, date, datetime, timedelta, tzinfo

from services.timezone_service import get_zone

DATE_STRING_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class InvalidDateFormatError(ValueError):
    """A calendar date string failed structural or calendar validation."""

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f'Invalid date "{value}": {reason}. Expected YYYY-MM-DD.')


def is_leap_year(year: int) -> bool:
    """Gregorian rule: every 4th year, except centuries not divisible by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def parse_date_string(date_str: str) -> date:
    """Validate a YYYY-MM-DD string and return the calendar date it names.

    Raises:
        InvalidDateFormatError: wrong pattern, month outside 1-12, day
            outside the month (including Feb 29 of a non-leap year), or a
            year outside 0001-9999.
    """
    if not isinstance(date_str, str) or not DATE_STRING_PATTERN.fullmatch(date_str):
        raise InvalidDateFormatError(date_str, "wrong format")

    year, month, day = (int(part) for part in date_str.split("-"))

    if year < 1:
        raise InvalidDateFormatError(date_str, "year out of range")
    if not 1 <= month <= 12:
        raise InvalidDateFormatError(date_str, "month out of range")
    if not 1 <= day <= days_in_month(year, month):
        raise InvalidDateFormatError(date_str, "day out of range for month")

    return date(year, month, day)


def parse_calendar_date(date_str: str, timezone: str | tzinfo) -> datetime:
    """Interpret a YYYY-MM-DD string as local midnight in ``timezone``.

    Returns an aware datetime normalized to UTC. When midnight does not
    exist locally (a DST gap at 00:00) the pre-transition offset applies
    (fold=0), which lands on the first instant of that calendar day.

    Example:
        >>> parse_calendar_date("2024-01-01", "America/Los_Angeles")
        datetime.datetime(2024, 1, 1, 8, 0, tzinfo=datetime.timezone.utc)
    """
    calendar_date = parse_date_string(date_str)
    local_midnight = datetime(
        calendar_date.year,
        calendar_date.month,
        calendar_date.day,
        tzinfo=get_zone(timezone),
    )
    return local_midnight.astimezone(UTC)


def _to_aware(instant: datetime) -> datetime:
    # Naive datetimes are treated as UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant


def project_to_date(instant: datetime, timezone: str | tzinfo) -> date:
    """Calendar date of ``instant`` as observed in ``timezone``."""
    return _to_aware(instant).astimezone(get_zone(timezone)).date()


def format_calendar_date(instant: datetime, timezone: str | tzinfo) -> str:
    """Format an instant as the YYYY-MM-DD date observed in ``timezone``.

    Example:
        >>> format_calendar_date(datetime(2024, 1, 1, 23, tzinfo=UTC), "America/Los_Angeles")
        '2024-01-01'
    """
    return project_to_date(instant, timezone).isoformat()


def day_difference(
    start: datetime | str,
    end: datetime | None = None,
    timezone: str | tzinfo = "UTC",
) -> int:
    """Whole calendar days from ``start`` to ``end`` in ``timezone``.

    Args:
        start: An instant, or a YYYY-MM-DD string (validated, then used as
            that calendar date).
        end: The later instant; defaults to now.
        timezone: Zone in which both ends are projected to calendar dates.

    Returns:
        The day count, clamped to 0 when ``end`` falls on an earlier
        calendar day than ``start``.

    Raises:
        InvalidDateFormatError: ``start`` is a malformed date string.
    """
    if isinstance(start, str):
        start_date = parse_date_string(start)
    else:
        start_date = project_to_date(start, timezone)

    if end is None:
        end = datetime.now(UTC)
    end_date = project_to_date(end, timezone)

    return max(0, (end_date - start_date).days)


def add_days(date_str: str, days: int) -> str:
    """Calendar date ``days`` after a YYYY-MM-DD date, as YYYY-MM-DD."""
    return (parse_date_string(date_str) + timedelta(days=days)).isoformat()
