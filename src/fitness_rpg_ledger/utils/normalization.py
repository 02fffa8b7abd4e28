"""
Normalization of loosely formatted spreadsheet values.

Turns raw cell strings into canonical dates, numbers and durations. Every
function returns None for input it cannot interpret; callers decide whether
that means skipping the row or falling back to a default.
"""

import math
import re
from datetime import date

from dateutil import parser as date_parser

_DATE_SEPARATORS = re.compile(r"[/\-]")
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"[+-]?\d+")

MIN_YEAR = 1900
MISSING_MARKER = "-"


def _clean(raw: object) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    if not value or value == MISSING_MARKER:
        return None
    return value


def _leading_float(value: str) -> float | None:
    match = _NUMBER_PREFIX.match(value.strip())
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def _leading_int(value: str) -> int | None:
    match = _INT_PREFIX.match(value.strip())
    return int(match.group(0)) if match else None


def _parse_iso(value: str) -> str | None:
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None

    if parsed.year <= MIN_YEAR:
        return None
    return parsed.date().isoformat()


def normalize_date(raw: object) -> str | None:
    """
    Normalize a date cell to an ISO ``YYYY-MM-DD`` string.

    ISO strings are accepted directly. Otherwise the value is split on ``/`` or
    ``-`` into three numbers and interpreted as DD/MM/YYYY, then MM/DD/YYYY,
    then YYYY/MM/DD; the first combination forming a real calendar date wins.

    Args:
        raw: Raw cell value.

    Returns:
        ISO date string, or None if the value is not a recognizable date.
    """
    value = _clean(raw)
    if value is None:
        return None

    iso = _parse_iso(value)
    if iso:
        return iso

    parts = _DATE_SEPARATORS.split(value)
    if len(parts) != 3:
        return None

    try:
        a, b, c = (int(part.strip()) for part in parts)
    except ValueError:
        return None

    candidates: list[tuple[int, int, int]] = []
    if a <= 31 and b <= 12 and c >= MIN_YEAR:
        candidates.append((c, b, a))
    if a <= 12 and b <= 31 and c >= MIN_YEAR:
        candidates.append((c, a, b))
    if a >= MIN_YEAR:
        candidates.append((a, b, c))

    for year, month, day in candidates:
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            continue

    return None


def parse_duration(raw: object) -> int | None:
    """
    Parse a duration cell into whole minutes.

    ``H:MM`` and ``H:MM:SS`` become ``H * 60 + MM`` (seconds are dropped); a
    bare number is taken as minutes and rounded half up.

    Args:
        raw: Raw cell value.

    Returns:
        Minutes, or None for empty, ``-`` or non-numeric values.
    """
    value = _clean(raw)
    if value is None:
        return None

    if ":" in value:
        hours, minutes = value.split(":")[:2]
        return (_leading_int(hours) or 0) * 60 + (_leading_int(minutes) or 0)

    number = _leading_float(value)
    if number is None:
        return None
    return int(math.floor(number + 0.5))


def parse_number(raw: object) -> float | None:
    """
    Parse a numeric cell, accepting a comma as decimal separator.

    Args:
        raw: Raw cell value.

    Returns:
        Parsed number, or None for empty, ``-`` or non-numeric values.
    """
    value = _clean(raw)
    if value is None:
        return None

    return _leading_float(value.replace(",", ".", 1))
