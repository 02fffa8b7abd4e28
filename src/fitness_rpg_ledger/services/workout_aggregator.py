"""
Workout aggregation.

Workouts are never stored; they are derived from the set collection whenever
it changes.
"""

from collections.abc import Iterable

from fitness_rpg_ledger.domain.records import Workout, WorkoutSet


def group_sets_into_workouts(sets: Iterable[WorkoutSet]) -> list[Workout]:
    """
    Group sets by date into workouts.

    Args:
        sets: Set collection.

    Returns:
        One workout per distinct date, most recent first. Exercises keep the
        order in which they first appear on that date.
    """
    by_date: dict[str, list[WorkoutSet]] = {}
    for workout_set in sets:
        by_date.setdefault(workout_set.date, []).append(workout_set)

    workouts = [
        Workout(
            date=date,
            sets=day_sets,
            total_volume=sum(s.volume for s in day_sets),
            exercises=list(dict.fromkeys(s.exercise for s in day_sets)),
        )
        for date, day_sets in by_date.items()
    ]

    workouts.sort(key=lambda w: w.date, reverse=True)
    return workouts


def total_volume(sets: Iterable[WorkoutSet]) -> float:
    """Sum of weight times reps over ``sets``."""
    return sum(s.volume for s in sets)
