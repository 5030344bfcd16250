"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Iterable
from dateutil import parser as date_parser

DEFAULT_DATE_PATTERNS = ("%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y")


def parse_statement_date(date_str: str, patterns: Iterable[str]) -> date:
    """Parse a statement date by trying each pattern in order.

    The first pattern that matches wins, so "05/01/2024" with
    ["%d/%m/%Y", "%m/%d/%Y"] is the 5th of January.

    Args:
        date_str: Raw date cell
        patterns: Ordered strptime patterns

    Returns:
        Date object

    Raises:
        ValueError: If the value is empty or no pattern matches
    """
    if date_str is None or not date_str.strip():
        raise ValueError("Date value is missing")

    value = date_str.strip()
    for pattern in patterns:
        try:
            return datetime.strptime(value, pattern).date()
        except ValueError:
            continue
    raise ValueError(f"Unable to parse date '{value}' using configured patterns")


def parse_date(date_str: str) -> date:
    """Parse a free-form date string given on the command line.

    Supports "today", "yesterday", "tomorrow" and anything dateutil
    understands ("2024-01-15", "January 15, 2024", ...).

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

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(value: str) -> datetime:
    """Parse a free-form timestamp, accepting the same relative words as parse_date.

    Raises:
        ValueError: If the value cannot be parsed
    """
    text = value.strip()
    if text.lower() == "now":
        return datetime.now()
    try:
        return date_parser.parse(text)
    except (ValueError, TypeError, OverflowError):
        return datetime.combine(parse_date(text), datetime.min.time())
