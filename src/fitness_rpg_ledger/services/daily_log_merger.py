"""
Daily log merge semantics.

Several partial updates can land on the same date (a workout-day sleep entry, a
meals entry, a supplements entry). They are folded into one record field by
field: optional values are filled in when the incoming update carries them,
and free-text fields only when the incoming text is non-empty.
"""

from typing import TypeVar

from fitness_rpg_ledger.domain.records import DailyLog
from fitness_rpg_ledger.utils.exceptions import InvariantViolationError

T = TypeVar("T")

SLEEP_FIELDS = (
    "bedtime",
    "wake_time",
    "sleep_duration",
    "sleep_score",
    "rem_minutes",
    "sleep_notes",
)
TEXT_FIELDS = ("meal1", "meal2", "meal3", "snacks")


def prefer_incoming_if_defined(incoming: T | None, existing: T | None) -> T | None:
    """Take ``incoming`` unless it is None."""
    return incoming if incoming is not None else existing


def prefer_incoming_if_non_empty(incoming: str | None, existing: str | None) -> str | None:
    """Take ``incoming`` only when it is a non-empty string; an empty string never erases."""
    return incoming if incoming else existing


def merge_supplements(existing: dict[str, str], incoming: dict[str, str]) -> dict[str, str]:
    """
    Superimpose incoming supplement entries over existing ones.

    Args:
        existing: Supplements already recorded for the date.
        incoming: Supplements from the update.

    Returns:
        Merged map; incoming wins on collisions and existing-only keys are kept.
    """
    return {**existing, **incoming}


def merge_daily_log(existing: DailyLog | None, incoming: DailyLog) -> DailyLog:
    """
    Merge an incoming (possibly partial) log into the log already stored for its date.

    Args:
        existing: Stored log for the same date, or None.
        incoming: New partial log.

    Returns:
        The merged log. Without a stored log, ``incoming`` is returned as-is.
    """
    if existing is None:
        return incoming

    if existing.date != incoming.date:
        raise InvariantViolationError(
            f"Cannot merge daily logs of different dates: {existing.date} vs {incoming.date}"
        )

    merged: dict[str, object] = {"date": incoming.date}

    for field in SLEEP_FIELDS:
        merged[field] = prefer_incoming_if_defined(
            getattr(incoming, field), getattr(existing, field)
        )

    for field in TEXT_FIELDS:
        merged[field] = prefer_incoming_if_non_empty(
            getattr(incoming, field), getattr(existing, field)
        )

    merged["supplements"] = merge_supplements(existing.supplements, incoming.supplements)

    # Counters are computed properties, rebuilt from the merged fields.
    return DailyLog(**merged)


def upsert_daily_log(logs: list[DailyLog], incoming: DailyLog) -> tuple[list[DailyLog], bool]:
    """
    Insert or merge ``incoming`` into a log collection.

    Args:
        logs: Canonical log collection (at most one log per date).
        incoming: New partial log.

    Returns:
        Tuple of (new collection sorted most recent first, whether the date was new).
    """
    updated: list[DailyLog] = []
    is_new = True

    for log in logs:
        if log.date == incoming.date:
            updated.append(merge_daily_log(log, incoming))
            is_new = False
        else:
            updated.append(log)

    if is_new:
        updated.append(incoming)

    return sort_logs(updated), is_new


def sort_logs(logs: list[DailyLog]) -> list[DailyLog]:
    """Sort logs most recent first."""
    return sorted(logs, key=lambda log: log.date, reverse=True)
