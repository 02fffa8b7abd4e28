"""Unit tests for daily log import."""

import pytest

from fitness_rpg_ledger.domain.records import TAKEN_MARKER, DailyLog, LogColumnMapping
from fitness_rpg_ledger.services.log_importer import (
    LogImporter,
    filter_new_logs,
    is_supplement_taken,
)

MAPPING = LogColumnMapping(
    date="Date",
    sleep_duration="Sleep",
    sleep_score="Score",
    wake_time="Wake",
    meal1="Breakfast",
    meal2="Lunch",
    meal3="Dinner",
    snacks="Snacks",
    supplements=["Creatine", "Omega3"],
)


def _row(**values: str) -> dict[str, str]:
    row = {
        "Date": "2024-03-01",
        "Sleep": "7:45",
        "Score": "82",
        "Wake": "07:10",
        "Breakfast": "Oats",
        "Lunch": "-",
        "Dinner": "Salmon",
        "Snacks": "",
        "Creatine": "yes",
        "Omega3": "no",
    }
    row.update(values)
    return row


def test_row_mapping() -> None:
    """Test that a full row maps onto every log field."""
    logs = LogImporter().map_rows([_row()], MAPPING, [])

    if len(logs) != 1:
        raise AssertionError(f"Expected 1 log, got {len(logs)}")

    log = logs[0]
    if log.sleep_duration != 465:
        raise AssertionError(f"Expected 465 minutes, got {log.sleep_duration}")
    if log.sleep_score != 82.0:
        raise AssertionError(f"Expected score 82, got {log.sleep_score}")
    if log.wake_time != "07:10":
        raise AssertionError(f"Expected wake time 07:10, got {log.wake_time}")
    if log.meal2 is not None:
        raise AssertionError(f"Expected '-' meal to be unset, got {log.meal2!r}")
    if log.meals_logged != 2:
        raise AssertionError(f"Expected 2 meals logged, got {log.meals_logged}")
    if log.supplements != {"Creatine": TAKEN_MARKER, "Omega3": ""}:
        raise AssertionError(f"Unexpected supplements {log.supplements}")
    if (log.supplements_taken, log.supplements_total) != (1, 2):
        raise AssertionError(
            f"Expected 1/2 supplements, got {log.supplements_taken}/{log.supplements_total}"
        )


def test_only_date_is_required() -> None:
    """Test that a mapping with only a date column still creates logs."""
    mapping = LogColumnMapping(date="Date")

    logs = LogImporter().map_rows([{"Date": "01/03/2024"}], mapping, [])

    if len(logs) != 1 or logs[0].date != "2024-03-01":
        raise AssertionError(f"Expected a single log for 2024-03-01, got {logs}")
    if logs[0].sleep_duration is not None or logs[0].supplements:
        raise AssertionError("Expected an otherwise empty log")


def test_mapping_accepts_camel_case_keys() -> None:
    """Test that column mappings can be given with camelCase keys."""
    mapping = LogColumnMapping.model_validate({"date": "Date", "sleepDuration": "Sleep"})

    if mapping.sleep_duration != "Sleep":
        raise AssertionError(f"Expected column 'Sleep', got {mapping.sleep_duration}")


def test_existing_dates_are_not_reimported() -> None:
    """Test that an import only adds dates not yet recorded."""
    existing = [DailyLog(date="2024-03-01", meal1="Eggs")]
    rows = [_row(), _row(Date="2024-03-02"), _row(Date="2024-03-02", Breakfast="Toast")]

    logs = LogImporter().map_rows(rows, MAPPING, existing)

    if [log.date for log in logs] != ["2024-03-02"]:
        raise AssertionError(f"Expected only 2024-03-02, got {[log.date for log in logs]}")
    if logs[0].meal1 != "Oats":
        raise AssertionError("Expected the first row for a date to win")


def test_rows_without_valid_date_are_skipped() -> None:
    """Test that rows with missing or invalid dates are skipped."""
    rows = [_row(Date=""), _row(Date="someday")]

    logs = LogImporter().map_rows(rows, MAPPING, [])

    if logs:
        raise AssertionError(f"Expected no logs, got {len(logs)}")


def test_negative_duration_is_dropped() -> None:
    """Test that a negative sleep duration is treated as not recorded."""
    logs = LogImporter().map_rows([_row(Sleep="-30")], MAPPING, [])

    if logs[0].sleep_duration is not None:
        raise AssertionError(f"Expected no duration, got {logs[0].sleep_duration}")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("yes", True), ("5g", True), ("x", True), ("", False), ("-", False), ("0", False),
     ("No", False), (None, False)],
)
def test_is_supplement_taken(raw: str | None, expected: bool) -> None:
    """Test supplement cell interpretation."""
    if is_supplement_taken(raw) is not expected:
        raise AssertionError(f"Expected {expected} for {raw!r}")


def test_filter_new_logs_first_occurrence_wins() -> None:
    """Test that filtering keeps the first log of each new date."""
    existing = [DailyLog(date="2024-03-01")]
    candidates = [
        DailyLog(date="2024-03-01", meal1="A"),
        DailyLog(date="2024-03-02", meal1="B"),
        DailyLog(date="2024-03-02", meal1="C"),
    ]

    fresh = filter_new_logs(candidates, existing)

    if [(log.date, log.meal1) for log in fresh] != [("2024-03-02", "B")]:
        raise AssertionError(f"Unexpected logs {fresh}")
