"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "tomorrow", "in 3 days", "next friday",
      "next week", "this month", etc.

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    match = re.fullmatch(r"in (\d+) (day|days|week|weeks)", date_str)
    if match:
        count = int(match.group(1))
        if match.group(2).startswith("week"):
            return today + timedelta(weeks=count)
        return today + timedelta(days=count)

    if date_str.startswith("next "):
        period = date_str[5:]
        if period == "week":
            # Monday of next week
            return today + timedelta(days=(7 - today.weekday()))
        elif period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period in WEEKDAYS:
            days_ahead = (WEEKDAYS.index(period) - today.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            return today + timedelta(days=days_ahead)

    elif date_str.startswith("last "):
        period = date_str[5:]
        if period == "week":
            return today - timedelta(days=today.weekday() + 7)
        elif period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7
            if days_ago == 0:
                days_ago = 7
            return today - timedelta(days=days_ago)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "week":
            return today - timedelta(days=today.weekday())
        elif period == "month":
            return today.replace(day=1)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the first and last day of a named period.

    Args:
        period: One of this-week, this-month, next-week, next-month,
            last-week, last-month
        today: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    first_of_month = today.replace(day=1)

    if period == "this-week":
        return (monday, monday + timedelta(days=6))
    elif period == "next-week":
        start_date = monday + timedelta(weeks=1)
        return (start_date, start_date + timedelta(days=6))
    elif period == "last-week":
        start_date = monday - timedelta(weeks=1)
        return (start_date, start_date + timedelta(days=6))
    elif period == "this-month":
        return (first_of_month, first_of_month + relativedelta(months=1) - timedelta(days=1))
    elif period == "next-month":
        start_date = first_of_month + relativedelta(months=1)
        return (start_date, start_date + relativedelta(months=1) - timedelta(days=1))
    elif period == "last-month":
        start_date = first_of_month - relativedelta(months=1)
        return (start_date, first_of_month - timedelta(days=1))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-week, this-month, "
        "next-week, next-month, last-week, last-month"
    )
