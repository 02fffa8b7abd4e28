"""Unit tests for streak calculation."""

from datetime import date, timedelta

from fitness_rpg_ledger.domain.records import DailyLog
from fitness_rpg_ledger.services.streaks import log_streak, sleep_streak, supplement_streak


def _days_ago(n: int, today: date = date(2024, 3, 15)) -> str:
    return (today - timedelta(days=n)).isoformat()


def test_run_ending_yesterday_counts() -> None:
    """Test that a 5-day run ending yesterday is 5 even with today missing."""
    logs = [DailyLog(date=_days_ago(n), sleep_duration=420) for n in range(1, 6)]

    streak = sleep_streak(logs)

    if streak != 5:
        raise AssertionError(f"Expected streak 5, got {streak}")


def test_gap_ends_the_run() -> None:
    """Test that the current run stops at the first gap, not the longest run."""
    recent = [_days_ago(0), _days_ago(1)]
    older = [_days_ago(n) for n in range(3, 10)]
    logs = [DailyLog(date=d, sleep_score=70) for d in recent + older]

    streak = sleep_streak(logs)

    if streak != 2:
        raise AssertionError(f"Expected streak 2, got {streak}")


def test_non_qualifying_days_are_ignored() -> None:
    """Test that only qualifying days form the run."""
    logs = [
        DailyLog(date=_days_ago(0), meal1="Oats"),
        DailyLog(date=_days_ago(1), sleep_duration=400),
        DailyLog(date=_days_ago(2), sleep_duration=400),
    ]

    streak = sleep_streak(logs)

    if streak != 2:
        raise AssertionError(f"Expected streak 2, got {streak}")


def test_no_qualifying_days() -> None:
    """Test that no qualifying day gives zero."""
    if sleep_streak([DailyLog(date=_days_ago(0))]) != 0:
        raise AssertionError("Expected streak 0")
    if log_streak([], lambda log: True) != 0:
        raise AssertionError("Expected streak 0 for no logs")


def test_duplicate_dates_count_once() -> None:
    """Test that repeated dates do not extend the run."""
    logs = [DailyLog(date=_days_ago(0)), DailyLog(date=_days_ago(0)), DailyLog(date=_days_ago(1))]

    if log_streak(logs, lambda log: True) != 2:
        raise AssertionError("Expected streak 2")


def test_supplement_streak_requires_full_adherence() -> None:
    """Test that a day counts only when every tracked supplement was taken."""
    logs = [
        DailyLog(date=_days_ago(0), supplements={"Zinc": "taken", "D3": "taken"}),
        DailyLog(date=_days_ago(1), supplements={"Zinc": "taken"}),
        DailyLog(date=_days_ago(2), supplements={"Zinc": "taken", "D3": ""}),
        DailyLog(date=_days_ago(3), supplements={"Zinc": "taken"}),
    ]

    streak = supplement_streak(logs)

    if streak != 2:
        raise AssertionError(f"Expected streak 2, got {streak}")


def test_days_without_supplements_do_not_qualify() -> None:
    """Test that a day tracking no supplements breaks the supplement run."""
    logs = [DailyLog(date=_days_ago(0)), DailyLog(date=_days_ago(1), supplements={"Zinc": "5mg"})]

    if supplement_streak(logs) != 1:
        raise AssertionError("Expected streak 1")
