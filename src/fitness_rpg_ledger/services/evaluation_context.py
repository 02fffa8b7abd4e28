"""
Evaluation context for quest and achievement predicates.

Slices the current state into the windows predicates look at: today, the
Monday-started week, the calendar month and the full history.
"""

from dataclasses import dataclass
from datetime import date, datetime
from functools import cached_property

from fitness_rpg_ledger.domain.progression import Character, GameState, Quest
from fitness_rpg_ledger.domain.records import DailyLog, Workout, WorkoutSet
from fitness_rpg_ledger.services.streaks import sleep_streak, supplement_streak
from fitness_rpg_ledger.services.workout_aggregator import group_sets_into_workouts
from fitness_rpg_ledger.utils.timezone_utils import month_start, parse_iso_date, week_start


def _on_or_after(iso_date: str, start: date) -> bool:
    day = parse_iso_date(iso_date)
    return day is not None and day >= start


@dataclass(frozen=True)
class EvaluationContext:
    """Read-only view of the state at evaluation time."""

    now: datetime
    character: Character
    sets: list[WorkoutSet]
    daily_logs: list[DailyLog]
    quests: list[Quest]

    @classmethod
    def from_state(cls, state: GameState, now: datetime) -> "EvaluationContext":
        """
        Build the context for ``state`` evaluated at ``now``.

        Args:
            state: Fully merged game state.
            now: Evaluation time, already in the configured timezone.

        Returns:
            Evaluation context.
        """
        return cls(
            now=now,
            character=state.character,
            sets=state.sets,
            daily_logs=state.daily_logs,
            quests=state.quests,
        )

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def today_iso(self) -> str:
        return self.today.isoformat()

    @property
    def week_start(self) -> date:
        return week_start(self.today)

    @property
    def month_start(self) -> date:
        return month_start(self.today)

    @cached_property
    def workouts(self) -> list[Workout]:
        return group_sets_into_workouts(self.sets)

    @cached_property
    def today_workouts(self) -> list[Workout]:
        return [w for w in self.workouts if w.date == self.today_iso]

    @cached_property
    def week_workouts(self) -> list[Workout]:
        return [w for w in self.workouts if _on_or_after(w.date, self.week_start)]

    @cached_property
    def month_workouts(self) -> list[Workout]:
        return [w for w in self.workouts if _on_or_after(w.date, self.month_start)]

    @cached_property
    def today_log(self) -> DailyLog | None:
        for log in self.daily_logs:
            if log.date == self.today_iso:
                return log
        return None

    @cached_property
    def week_logs(self) -> list[DailyLog]:
        return [log for log in self.daily_logs if _on_or_after(log.date, self.week_start)]

    @cached_property
    def month_logs(self) -> list[DailyLog]:
        return [log for log in self.daily_logs if _on_or_after(log.date, self.month_start)]

    @cached_property
    def unique_exercises(self) -> set[str]:
        return {s.exercise.lower() for s in self.sets}

    @cached_property
    def sleep_streak(self) -> int:
        return sleep_streak(self.daily_logs)

    @cached_property
    def supplement_streak(self) -> int:
        return supplement_streak(self.daily_logs)

    @cached_property
    def days_with_meals(self) -> int:
        return sum(1 for log in self.daily_logs if log.meals_logged > 0)

    @cached_property
    def completed_quest_count(self) -> int:
        return sum(1 for quest in self.quests if quest.completed)
