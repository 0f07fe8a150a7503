"""Date and quarter parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_QUARTER_PATTERN = re.compile(r"^q?([1-4])$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2025-01-15", "January 15, 2025", etc.
    - Relative dates: "today", "yesterday", "last month", "this quarter", etc.

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

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "quarter":
            return quarter_start(today) - relativedelta(months=3)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "quarter":
            return quarter_start(today)
        elif period == "year":
            return today.replace(month=1, day=1)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_quarter(value: str | int) -> int:
    """Parse a quarter given as 1-4 or Q1-Q4.

    Raises:
        ValueError: If the value is not a quarter
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if 1 <= value <= 4:
            return value
        raise ValueError(f"Quarter must be 1-4, got {value}")

    match = _QUARTER_PATTERN.match(str(value).strip().lower())
    if match is None:
        raise ValueError(f"Could not parse quarter '{value}' (expected 1-4 or Q1-Q4)")
    return int(match.group(1))


def quarter_of(day: date) -> int:
    """Return the calendar quarter (1-4) containing a date."""
    return (day.month - 1) // 3 + 1


def quarter_start(day: date) -> date:
    """Return the first day of the quarter containing a date."""
    return date(day.year, (quarter_of(day) - 1) * 3 + 1, 1)


def previous_quarter(today: date | None = None) -> tuple[int, int]:
    """Return (quarter, year) of the most recently closed quarter."""
    today = today or date.today()
    start = quarter_start(today) - relativedelta(months=3)
    return quarter_of(start), start.year
