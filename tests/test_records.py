"""Unit tests for record and state models."""

import json

from fitness_rpg_ledger.domain.progression import GameState
from fitness_rpg_ledger.domain.records import TAKEN_MARKER, DailyLog, WorkoutSet


def test_supplement_counters() -> None:
    """Test that an empty dose counts as tracked but not taken."""
    log = DailyLog(
        date="2024-03-01", supplements={"CreatineMonohydrate": "5g", "Omega3": ""}
    )

    if log.supplements_taken != 1:
        raise AssertionError(f"Expected 1 supplement taken, got {log.supplements_taken}")
    if log.supplements_total != 2:
        raise AssertionError(f"Expected 2 supplements tracked, got {log.supplements_total}")
    if log.is_supplement_adherent:
        raise AssertionError("Expected log not to be supplement adherent")


def test_meals_logged_excludes_snacks_and_placeholders() -> None:
    """Test that only filled named meals are counted."""
    log = DailyLog(date="2024-03-01", meal1="Oats", meal2="  ", meal3="-", snacks="Nuts")

    if log.meals_logged != 1:
        raise AssertionError(f"Expected 1 meal logged, got {log.meals_logged}")


def test_boolean_supplements_are_coerced() -> None:
    """Test that boolean supplement flags load as doses."""
    log = DailyLog.model_validate(
        {"date": "2024-03-01", "supplements": {"Creatine": True, "Zinc": False}}
    )

    if log.supplements != {"Creatine": TAKEN_MARKER, "Zinc": ""}:
        raise AssertionError(f"Unexpected supplements {log.supplements}")


def test_counters_are_serialized_with_camel_case() -> None:
    """Test that the serialized log carries camelCase keys and counters."""
    log = DailyLog(date="2024-03-01", sleep_score=80, meal1="Oats", supplements={"Zinc": ""})

    data = log.model_dump(by_alias=True)

    if data["sleepScore"] != 80.0:
        raise AssertionError(f"Expected sleepScore 80, got {data.get('sleepScore')}")
    if (data["mealsLogged"], data["supplementsTaken"], data["supplementsTotal"]) != (1, 0, 1):
        raise AssertionError(f"Unexpected counters in {data}")


def test_workout_set_volume() -> None:
    """Test set volume and identity."""
    workout_set = WorkoutSet(id="x", date="2024-01-01", exercise="Squat", weight=100, reps=5)

    if workout_set.volume != 500.0:
        raise AssertionError(f"Expected volume 500, got {workout_set.volume}")
    if workout_set.key != ("2024-01-01", "Squat", 100.0, 5):
        raise AssertionError(f"Unexpected key {workout_set.key}")


def test_snapshot_shape_and_round_trip() -> None:
    """Test that the snapshot has the persisted shape and loads back losslessly."""
    state = GameState(
        sets=[WorkoutSet(id="x", date="2024-01-01", exercise="Squat", weight=100, reps=5)],
        daily_logs=[DailyLog(date="2024-03-01", meal1="Oats", supplements={"Zinc": "taken"})],
    )

    payload = state.to_json()
    data = json.loads(payload)

    if set(data) != {"character", "sets", "dailyLogs", "quests", "achievements"}:
        raise AssertionError(f"Unexpected snapshot keys {sorted(data)}")
    if "xpToNextLevel" not in data["character"]:
        raise AssertionError("Expected camelCase character fields")

    restored = GameState.from_json(payload)
    if restored != state:
        raise AssertionError("Expected snapshot round trip to be lossless")


def test_log_for() -> None:
    """Test lookup of a log by date."""
    state = GameState(daily_logs=[DailyLog(date="2024-03-01"), DailyLog(date="2024-03-02")])

    if state.log_for("2024-03-02") is None:
        raise AssertionError("Expected to find the 2024-03-02 log")
    if state.log_for("2024-03-03") is not None:
        raise AssertionError("Expected no log for 2024-03-03")
