"""Unit tests for spreadsheet value normalization."""

import pytest

from fitness_rpg_ledger.utils.normalization import normalize_date, parse_duration, parse_number


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-03-01", "2024-03-01"),
        ("2024-03-01T10:30:00", "2024-03-01"),
        ("01/03/2024", "2024-03-01"),
        ("12/25/2024", "2024-12-25"),
        ("2024/03/05", "2024-03-05"),
        (" 5-6-2024 ", "2024-06-05"),
    ],
)
def test_normalize_date_formats(raw: str, expected: str) -> None:
    """Test that supported date layouts normalize to ISO dates."""
    result = normalize_date(raw)
    if result != expected:
        raise AssertionError(f"Expected {expected} for {raw!r}, got {result}")


@pytest.mark.parametrize("raw", [None, "", "-", "not a date", "31/02/2024", "1/2", "01/02/99"])
def test_normalize_date_rejects_invalid(raw: str | None) -> None:
    """Test that unrecognizable dates yield None."""
    result = normalize_date(raw)
    if result is not None:
        raise AssertionError(f"Expected None for {raw!r}, got {result}")


def test_normalize_date_prefers_day_first() -> None:
    """Test that an ambiguous date is read as DD/MM/YYYY."""
    result = normalize_date("03/04/2024")
    if result != "2024-04-03":
        raise AssertionError(f"Expected day-first reading, got {result}")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("7:30", 450),
        ("07:30:45", 450),
        ("450", 450),
        ("7.5", 8),
        ("2.5", 3),
        ("2.4", 2),
        ("480 min", 480),
    ],
)
def test_parse_duration(raw: str, expected: int) -> None:
    """Test duration parsing into whole minutes."""
    result = parse_duration(raw)
    if result != expected:
        raise AssertionError(f"Expected {expected} for {raw!r}, got {result}")


@pytest.mark.parametrize("raw", [None, "", "-", "abc"])
def test_parse_duration_missing(raw: str | None) -> None:
    """Test that missing or non-numeric durations yield None."""
    if parse_duration(raw) is not None:
        raise AssertionError(f"Expected None for {raw!r}")


def test_parse_number_comma_decimal() -> None:
    """Test that a comma is accepted as decimal separator."""
    result = parse_number("82,5")
    if result != 82.5:
        raise AssertionError(f"Expected 82.5, got {result}")


def test_parse_number_leading_prefix() -> None:
    """Test that trailing units are ignored."""
    result = parse_number("100kg")
    if result != 100.0:
        raise AssertionError(f"Expected 100.0, got {result}")


@pytest.mark.parametrize("raw", [None, "", "-", "heavy"])
def test_parse_number_invalid(raw: str | None) -> None:
    """Test that non-numeric values yield None."""
    if parse_number(raw) is not None:
        raise AssertionError(f"Expected None for {raw!r}")
