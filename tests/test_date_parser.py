"""Tests for date and amount parsing utilities."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import (
    clamp_day,
    days_in_month,
    format_date,
    get_date_range,
    parse_date,
    to_date,
)


def test_parse_absolute_date():
    assert parse_date("2024-01-15") == date(2024, 1, 15)


@pytest.mark.parametrize(
    "text, offset",
    [("today", 0), ("yesterday", -1), ("tomorrow", 1), ("  Today ", 0)],
)
def test_parse_relative_days(text, offset):
    assert parse_date(text) == date.today() + timedelta(days=offset)


def test_parse_relative_months():
    first = date.today().replace(day=1)

    assert parse_date("this month") == first
    assert parse_date("last month") == first - relativedelta(months=1)
    assert parse_date("next month") == first + relativedelta(months=1)


def test_parse_relative_weeks_are_mondays():
    for text in ("last week", "this week", "next week"):
        assert parse_date(text).weekday() == 0
    assert parse_date("next week") - parse_date("last week") == timedelta(days=14)


def test_parse_relative_years():
    assert parse_date("last year") == date(date.today().year - 1, 1, 1)
    assert parse_date("this year") == date(date.today().year, 1, 1)


def test_parse_standard_formats():
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_to_date():
    assert to_date(date(2024, 2, 29)) == date(2024, 2, 29)
    assert to_date(datetime(2024, 2, 29, 23, 59)) == date(2024, 2, 29)
    assert to_date(" 2024-02-29 ") == date(2024, 2, 29)


@pytest.mark.parametrize("value", ["2024-02-30", "02/29/2024", None, 20240229])
def test_to_date_rejects(value):
    with pytest.raises(ValueError):
        to_date(value)


def test_format_date():
    assert format_date(date(2024, 3, 5)) == "2024-03-05"


def test_calendar_helpers():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert clamp_day(2024, 4, 31) == date(2024, 4, 30)
    assert clamp_day(2024, 4, 15) == date(2024, 4, 15)


def test_get_date_range_last_month():
    today = date.today()
    start, end = get_date_range("last-month")

    assert start == (today - relativedelta(months=1)).replace(day=1)
    assert end == today.replace(day=1) - timedelta(days=1)


def test_get_date_range_last_week():
    start, end = get_date_range("last-week")

    assert start.weekday() == 0
    assert end.weekday() == 6
    assert (end - start).days == 6


def test_get_date_range_invalid_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("-$20", Decimal("-20")),
        ("(45.10)", Decimal("-45.10")),
        (" 7 ", Decimal("7")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "1.2.3"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)
