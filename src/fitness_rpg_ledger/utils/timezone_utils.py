"""
Timezone and calendar utilities.

Provides the evaluation clock and the week/month window anchors used by quest
predicates.
"""

from datetime import date, datetime, timedelta

import pytz


def make_timezone_aware(dt: datetime, timezone_str: str = "UTC") -> datetime:
    """
    Make a datetime object timezone-aware.

    Naive datetimes are assumed to already be expressed in ``timezone_str``.

    Args:
        dt: Datetime object (may be naive or aware).
        timezone_str: Timezone string (e.g., "Europe/Madrid").

    Returns:
        Timezone-aware datetime object in ``timezone_str``.
    """
    tz = pytz.timezone(timezone_str)

    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def now_in_timezone(timezone_str: str = "UTC") -> datetime:
    """
    Get the current time in the given timezone.

    Args:
        timezone_str: Timezone string.

    Returns:
        Timezone-aware current datetime.
    """
    return datetime.now(pytz.timezone(timezone_str))


def week_start(day: date) -> date:
    """
    Get the Monday starting the week that contains ``day``.

    Args:
        day: Any calendar date.

    Returns:
        Monday of the same week.
    """
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    """Get the first day of the calendar month containing ``day``."""
    return day.replace(day=1)


def parse_iso_date(value: str) -> date | None:
    """
    Parse an ISO ``YYYY-MM-DD`` string.

    Args:
        value: ISO date string.

    Returns:
        Date object, or None if the string is not a valid ISO date.
    """
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None
