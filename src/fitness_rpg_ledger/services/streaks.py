"""Streak calculation over daily logs."""

from collections.abc import Callable, Iterable
from datetime import timedelta

from fitness_rpg_ledger.domain.records import DailyLog
from fitness_rpg_ledger.utils.timezone_utils import parse_iso_date

LogPredicate = Callable[[DailyLog], bool]


def log_streak(logs: Iterable[DailyLog], qualifies: LogPredicate) -> int:
    """
    Count the current run of consecutive qualifying days.

    The run ends at the most recent qualifying date, whether or not that date is
    today, and stops at the first calendar gap going backwards. It is not the
    longest run in history.

    Args:
        logs: Daily logs.
        qualifies: Predicate selecting qualifying days.

    Returns:
        Length of the run, 0 when no day qualifies.
    """
    days = sorted(
        {day for day in (parse_iso_date(log.date) for log in logs if qualifies(log)) if day},
        reverse=True,
    )
    if not days:
        return 0

    streak = 1
    for current, previous in zip(days, days[1:]):
        if current - previous != timedelta(days=1):
            break
        streak += 1

    return streak


def has_sleep(log: DailyLog) -> bool:
    """A day with a sleep duration or score."""
    return log.has_sleep_signal


def is_fully_supplemented(log: DailyLog) -> bool:
    """A day with at least one tracked supplement and all of them taken."""
    return log.supplements_total > 0 and log.is_supplement_adherent


def sleep_streak(logs: Iterable[DailyLog]) -> int:
    """Current run of days with sleep logged."""
    return log_streak(logs, has_sleep)


def supplement_streak(logs: Iterable[DailyLog]) -> int:
    """Current run of days with full supplement adherence."""
    return log_streak(logs, is_fully_supplemented)
