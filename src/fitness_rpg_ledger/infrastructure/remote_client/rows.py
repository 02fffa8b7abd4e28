"""
Conversion between domain records and remote mirror rows.

Remote tables:
    workouts    {date, exercise, weight, reps}
    sleep       {date, bedtime, wake_time, duration_hours "HH:MM:SS", quality, rem, notes}
    meals       {date, meal_type, food}       one row per meal slot
    supplements {date, supplement, dose}      one row per supplement taken
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet
from fitness_rpg_ledger.utils.hashing import generate_set_id
from fitness_rpg_ledger.utils.normalization import normalize_date, parse_duration, parse_number
from fitness_rpg_ledger.utils.parameters import SetIDConfig

logger = logging.getLogger(__name__)

MEAL_TYPE_TO_FIELD = {
    "meal 1": "meal1",
    "breakfast": "meal1",
    "meal 2": "meal2",
    "lunch": "meal2",
    "meal 3": "meal3",
    "dinner": "meal3",
    "snack": "snacks",
    "snacks": "snacks",
}
FIELD_TO_MEAL_TYPE = {"meal1": "meal 1", "meal2": "meal 2", "meal3": "meal 3", "snacks": "snacks"}


def minutes_to_hms(minutes: int) -> str:
    """Format minutes as ``HH:MM:SS``."""
    hours, rest = divmod(minutes, 60)
    return f"{hours:02d}:{rest:02d}:00"


def _optional_int(value: Any) -> int | None:
    number = parse_number(value)
    return int(number) if number is not None and number >= 0 else None


# Workouts


def set_to_row(workout_set: WorkoutSet) -> dict[str, Any]:
    """Convert a set to a ``workouts`` row."""
    return {
        "date": workout_set.date,
        "exercise": workout_set.exercise,
        "weight": workout_set.weight,
        "reps": workout_set.reps,
    }


def row_to_set(row: dict[str, Any], id_config: SetIDConfig | None = None) -> WorkoutSet | None:
    """
    Convert a ``workouts`` row to a set.

    Args:
        row: Remote row.
        id_config: Used to derive an ID when the row has none.

    Returns:
        Workout set, or None if the row is not a valid set.
    """
    date = normalize_date(row.get("date"))
    exercise = str(row.get("exercise") or "").strip()
    if date is None or not exercise:
        return None

    weight = parse_number(row.get("weight")) or 0.0
    reps = int(parse_number(row.get("reps")) or 0)

    if row.get("id") is not None:
        set_id = str(row["id"])
    else:
        set_id = generate_set_id(date, exercise, weight, reps, id_config or SetIDConfig())

    try:
        return WorkoutSet(id=set_id, date=date, exercise=exercise, weight=weight, reps=reps)
    except ValidationError as e:
        logger.warning(f"Skipping invalid remote workout row {row!r}: {e}")
        return None


# Sleep


def log_to_sleep_row(log: DailyLog) -> dict[str, Any] | None:
    """
    Convert the sleep part of a log to a ``sleep`` row.

    Fields that are not recorded are left out so they do not overwrite remote values.

    Returns:
        Row, or None if the log carries no sleep data.
    """
    row: dict[str, Any] = {
        "bedtime": log.bedtime,
        "wake_time": log.wake_time,
        "duration_hours": (
            minutes_to_hms(log.sleep_duration) if log.sleep_duration is not None else None
        ),
        "quality": f"{log.sleep_score:g}" if log.sleep_score is not None else None,
        "rem": log.rem_minutes,
        "notes": log.sleep_notes,
    }
    row = {key: value for key, value in row.items() if value is not None}
    if not row:
        return None
    return {"date": log.date, **row}


def sleep_row_to_log(row: dict[str, Any]) -> DailyLog | None:
    """Convert a ``sleep`` row to a partial log, or None if its date is invalid."""
    date = normalize_date(row.get("date"))
    if date is None:
        return None

    try:
        return DailyLog(
            date=date,
            bedtime=row.get("bedtime") or None,
            wake_time=row.get("wake_time") or None,
            sleep_duration=parse_duration(row.get("duration_hours")),
            sleep_score=parse_number(row.get("quality")),
            rem_minutes=_optional_int(row.get("rem")),
            sleep_notes=row.get("notes") or None,
        )
    except ValidationError as e:
        logger.warning(f"Skipping invalid remote sleep row {row!r}: {e}")
        return None


# Meals


def log_to_meal_rows(log: DailyLog) -> list[dict[str, Any]]:
    """Convert the meals of a log to ``meals`` rows, one per filled slot."""
    rows = []
    for field, meal_type in FIELD_TO_MEAL_TYPE.items():
        food = getattr(log, field)
        if food and food.strip():
            rows.append({"date": log.date, "meal_type": meal_type, "food": food})
    return rows


def meal_rows_to_logs(rows: Iterable[dict[str, Any]]) -> list[DailyLog]:
    """
    Group ``meals`` rows into one partial log per date.

    Snack rows are joined with ``", "``; rows with an unknown meal type are ignored.
    """
    by_date: dict[str, dict[str, str]] = {}

    for row in rows:
        date = normalize_date(row.get("date"))
        field = MEAL_TYPE_TO_FIELD.get(str(row.get("meal_type") or "").strip().lower())
        food = str(row.get("food") or "").strip()
        if date is None or field is None or not food:
            continue

        meals = by_date.setdefault(date, {})
        if field == "snacks" and meals.get("snacks"):
            meals["snacks"] = f"{meals['snacks']}, {food}"
        else:
            meals[field] = food

    return [DailyLog(date=date, **meals) for date, meals in by_date.items()]


# Supplements


def log_to_supplement_rows(log: DailyLog) -> list[dict[str, Any]]:
    """Convert the supplements of a log to ``supplements`` rows; untaken ones are skipped."""
    return [
        {"date": log.date, "supplement": name, "dose": dose}
        for name, dose in log.supplements.items()
        if dose
    ]


def supplement_rows_to_logs(rows: Iterable[dict[str, Any]]) -> list[DailyLog]:
    """Group ``supplements`` rows into one partial log per date."""
    by_date: dict[str, dict[str, str]] = {}

    for row in rows:
        date = normalize_date(row.get("date"))
        name = str(row.get("supplement") or "").strip()
        if date is None or not name:
            continue
        by_date.setdefault(date, {})[name] = str(row.get("dose") or "")

    return [DailyLog(date=date, supplements=supps) for date, supps in by_date.items()]
