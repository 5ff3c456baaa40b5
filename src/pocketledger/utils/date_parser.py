"""Date parsing and calendar utilities.

Dates are always calendar dates (``datetime.date``). The canonical stored
form is ``YYYY-MM-DD``; nothing here converts through UTC.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DATE_FORMAT = "%Y-%m-%d"

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def parse_date(date_str: str) -> date:
    """Parse user input into a date.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative words "today", "yesterday", "tomorrow", "last/this/next month",
    "last/this/next week" and "last/this/next year".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    prefix, _, period = date_str.partition(" ")
    offsets = {"last": -1, "this": 0, "next": 1}
    if prefix in offsets and period in ("week", "month", "year"):
        step = offsets[prefix]
        if period == "week":
            # Monday of the week
            return today - timedelta(days=today.weekday()) + timedelta(weeks=step)
        if period == "month":
            return today.replace(day=1) + relativedelta(months=step)
        return today.replace(month=1, day=1) + relativedelta(years=step)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce a stored value into a calendar date.

    Strings must be in ``YYYY-MM-DD`` form; datetimes keep their own
    year/month/day (no time zone shift).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), DATE_FORMAT).date()
        except ValueError:
            raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD")
    raise ValueError(f"Invalid date {value!r}")


def format_date(d: date) -> str:
    """Return the canonical ``YYYY-MM-DD`` form of a calendar date."""
    return d.strftime(DATE_FORMAT)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Return the date for ``day`` in the given month, clamped to month end."""
    return date(year, month, min(day, days_in_month(year, month)))


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, this-year, this-week, last-month,
            last-year, last-week

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()
    monday = today - timedelta(days=today.weekday())

    if period == "this-month":
        return (today.replace(day=1), today)
    if period == "this-year":
        return (today.replace(month=1, day=1), today)
    if period == "this-week":
        return (monday, today)
    if period == "last-month":
        first_of_month = today.replace(day=1)
        return (first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1))
    if period == "last-year":
        first_of_year = today.replace(month=1, day=1)
        return (first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1))
    if period == "last-week":
        start = monday - timedelta(days=7)
        return (start, start + timedelta(days=6))

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
