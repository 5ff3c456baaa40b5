"""Recurrence date calculator.

Given a template's rule, start date, optional end date and watermark
(``last_generated``), compute the ascending calendar dates on which the
template is due. Everything here is pure: no storage, no clock.
"""

from dataclasses import replace
from datetime import date, timedelta
from itertools import takewhile
from typing import Any, Iterator, Mapping, Optional

from pocketledger.domain.entities import (
    BiweeklyRule,
    DayListRule,
    IntervalRule,
    MonthlyRule,
    RecurrenceRule,
    RecurrenceTemplate,
    WeeklyRule,
)
from pocketledger.utils.date_parser import clamp_day

BIWEEKLY_DAYS = 14
DEFAULT_CUSTOM_INTERVAL = 30
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _field(pattern: Mapping[str, Any], snake: str, camel: str) -> Any:
    if snake in pattern:
        return pattern[snake]
    return pattern.get(camel)


def parse_recurrence(pattern: Mapping[str, Any]) -> RecurrenceRule:
    """Build a rule from either stored pattern shape.

    Accepts ``{frequency, interval}`` as well as the day-based shape
    ``{frequency, dayOfMonth | dayOfWeek | customDates}`` (snake_case keys
    work too).

    Raises:
        ValueError: If the pattern does not describe a usable rule
    """
    frequency = pattern.get("frequency")

    if frequency == "monthly":
        day_of_month = _field(pattern, "day_of_month", "dayOfMonth")
        if day_of_month is not None and not 1 <= int(day_of_month) <= 31:
            raise ValueError("Day of month must be between 1 and 31")
        return MonthlyRule(day_of_month=int(day_of_month) if day_of_month is not None else None)

    if frequency == "biweekly":
        return BiweeklyRule()

    if frequency == "weekly":
        day_of_week = _field(pattern, "day_of_week", "dayOfWeek")
        if day_of_week is None or not 0 <= int(day_of_week) <= 6:
            raise ValueError("Weekly recurrence needs a day of week between 0 and 6")
        return WeeklyRule(day_of_week=int(day_of_week))

    if frequency == "custom":
        custom_dates = _field(pattern, "custom_dates", "customDates")
        if custom_dates:
            days = tuple(sorted({int(d) for d in custom_dates}))
            if days[0] < 1 or days[-1] > 31:
                raise ValueError("Custom dates must be days of month between 1 and 31")
            return DayListRule(days=days)
        interval = pattern.get("interval") or DEFAULT_CUSTOM_INTERVAL
        if int(interval) < 1:
            raise ValueError("Interval must be at least 1 day for custom frequency")
        return IntervalRule(interval=int(interval))

    raise ValueError(f"Unknown recurrence frequency: {frequency!r}")


def recurrence_to_dict(rule: RecurrenceRule) -> dict[str, Any]:
    """Serialize a rule back to its stored pattern shape."""
    match rule:
        case MonthlyRule(day_of_month=None):
            return {"frequency": "monthly"}
        case MonthlyRule(day_of_month=day):
            return {"frequency": "monthly", "day_of_month": day}
        case BiweeklyRule():
            return {"frequency": "biweekly"}
        case IntervalRule(interval=interval):
            return {"frequency": "custom", "interval": interval}
        case WeeklyRule(day_of_week=day):
            return {"frequency": "weekly", "day_of_week": day}
        case DayListRule(days=days):
            return {"frequency": "custom", "custom_dates": list(days)}
    raise TypeError(f"Not a recurrence rule: {rule!r}")


def describe_recurrence(rule: RecurrenceRule) -> str:
    """Human-readable label for a rule."""
    match rule:
        case MonthlyRule(day_of_month=None):
            return "Monthly"
        case MonthlyRule(day_of_month=day):
            return f"Monthly on day {day}"
        case BiweeklyRule():
            return "Every 2 weeks"
        case IntervalRule(interval=interval):
            return f"Every {interval} days"
        case WeeklyRule(day_of_week=day):
            return f"Weekly on {WEEKDAY_NAMES[day]}"
        case DayListRule(days=days):
            return "Monthly on days " + ", ".join(str(d) for d in days)
    return "Unknown pattern"


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def _monthly(anchor_day: int, start: date, last: Optional[date]) -> Iterator[date]:
    if last is None:
        year, month = start.year, start.month
    else:
        year, month = _next_month(last.year, last.month)
    while True:
        # The next month is always derived from the anchor, never the clamped day
        candidate = clamp_day(year, month, anchor_day)
        if candidate >= start:
            yield candidate
        year, month = _next_month(year, month)


def _stride(step_days: int, first: date, start: date, last: Optional[date]) -> Iterator[date]:
    if step_days < 1:
        raise ValueError("Recurrence interval must be at least 1 day")
    step = timedelta(days=step_days)
    current = last + step if last is not None else first
    while True:
        if current >= start:
            yield current
        current += step


def _day_list(days: tuple[int, ...], start: date, last: Optional[date]) -> Iterator[date]:
    if not days:
        raise ValueError("Custom dates recurrence needs at least one day")
    year, month = (last.year, last.month) if last is not None else (start.year, start.month)
    while True:
        for candidate in sorted({clamp_day(year, month, d) for d in days}):
            if candidate >= start and (last is None or candidate > last):
                yield candidate
        year, month = _next_month(year, month)


def iter_rule_dates(
    rule: RecurrenceRule,
    start: date,
    last: Optional[date] = None,
    end: Optional[date] = None,
) -> Iterator[date]:
    """Yield a rule's dates on or after ``start`` and after ``last``, ascending.

    The sequence is unbounded unless ``end`` is given.
    """
    match rule:
        case MonthlyRule(day_of_month=day):
            dates = _monthly(day or start.day, start, last)
        case BiweeklyRule():
            dates = _stride(BIWEEKLY_DAYS, start, start, last)
        case IntervalRule(interval=interval):
            dates = _stride(interval, start, start, last)
        case WeeklyRule(day_of_week=day):
            # Stored weekdays count from Sunday; date.weekday() counts from Monday
            offset = ((day - 1) % 7 - start.weekday()) % 7
            dates = _stride(7, start + timedelta(days=offset), start, last)
        case DayListRule(days=days):
            dates = _day_list(days, start, last)
        case _:
            raise TypeError(f"Not a recurrence rule: {rule!r}")

    if end is not None:
        return takewhile(lambda d: d <= end, dates)
    return dates


def iter_occurrences(template: RecurrenceTemplate) -> Iterator[date]:
    """Yield the template's occurrences after its watermark, ascending."""
    return iter_rule_dates(
        template.recurrence,
        template.start_date,
        last=template.last_generated,
        end=template.end_date,
    )


def due_dates(template: RecurrenceTemplate, as_of: date) -> list[date]:
    """Dates the template is due on, up to and including ``as_of``.

    Every date is on or after the start date, after ``last_generated`` and
    no later than ``as_of`` (or the end date, when earlier).
    """
    if template.start_date > as_of:
        return []
    if template.last_generated is not None and template.last_generated >= as_of:
        return []
    return list(takewhile(lambda d: d <= as_of, iter_occurrences(template)))


def occurrences_between(template: RecurrenceTemplate, start: date, end: date) -> list[date]:
    """All occurrences in ``[start, end]`` regardless of the watermark."""
    if start > end:
        return []
    unwatermarked = replace(template, last_generated=None)
    return [d for d in due_dates(unwatermarked, end) if d >= start]


def next_occurrence(template: RecurrenceTemplate, after: date) -> Optional[date]:
    """First occurrence strictly after ``after`` that has not been generated."""
    for candidate in iter_occurrences(template):
        if candidate > after:
            return candidate
    return None
