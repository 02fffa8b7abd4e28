"""
Progression engine.

Turns new facts (workout sets, daily logs) into experience, level-ups, quest
progress and achievement unlocks. Every operation is a pure transition from
one game state to the next; quests and achievements are always evaluated
against the fully merged state.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from fitness_rpg_ledger.domain.progression import (
    DEFAULT_CHARACTER_NAME,
    Achievement,
    Character,
    GameState,
    Quest,
)
from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet
from fitness_rpg_ledger.services.achievement_catalog import (
    ACHIEVEMENT_REGISTRY,
    create_default_achievements,
)
from fitness_rpg_ledger.services.daily_log_merger import sort_logs, upsert_daily_log
from fitness_rpg_ledger.services.evaluation_context import EvaluationContext
from fitness_rpg_ledger.services.log_importer import filter_new_logs
from fitness_rpg_ledger.services.quest_catalog import QUEST_REGISTRY, create_default_quests
from fitness_rpg_ledger.services.set_importer import filter_new_sets
from fitness_rpg_ledger.services.workout_aggregator import group_sets_into_workouts, total_volume
from fitness_rpg_ledger.utils.exceptions import InvariantViolationError
from fitness_rpg_ledger.utils.parameters import ProgressionConfig
from fitness_rpg_ledger.utils.timezone_utils import make_timezone_aware, now_in_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestUpdate:
    """Result of recomputing quest progress."""

    quests: list[Quest]
    xp_earned: int
    completed: list[Quest] = field(default_factory=list)


@dataclass(frozen=True)
class AchievementUpdate:
    """Result of evaluating achievements."""

    achievements: list[Achievement]
    unlocked: list[Achievement] = field(default_factory=list)


@dataclass(frozen=True)
class ProgressionOutcome:
    """A state transition together with what it earned."""

    state: GameState
    changed: bool = True
    xp_awarded: int = 0
    levels_gained: int = 0
    completed_quests: list[Quest] = field(default_factory=list)
    unlocked_achievements: list[Achievement] = field(default_factory=list)

    @classmethod
    def unchanged(cls, state: GameState) -> "ProgressionOutcome":
        """Outcome of a no-op."""
        return cls(state=state, changed=False)


class ProgressionEngine:
    """
    Engine computing experience, levels, quests and achievements.

    Holds no state of its own; callers pass the current state in and get a new
    state back.
    """

    def __init__(self, config: ProgressionConfig | None = None, timezone: str = "UTC") -> None:
        """
        Initialize progression engine.

        Args:
            config: Experience and leveling constants.
            timezone: Timezone in which "today", weeks and months are evaluated.
        """
        self.config = config or ProgressionConfig()
        self.timezone = timezone

    def _resolve_now(self, now: datetime | None) -> datetime:
        if now is None:
            return now_in_timezone(self.timezone)
        return make_timezone_aware(now, self.timezone)

    # Experience

    def xp_to_next_level(self, level: int) -> int:
        """Experience needed to leave ``level``."""
        return level * self.config.xp_per_level_multiplier

    def xp_for_sets(self, new_sets: Iterable[WorkoutSet]) -> int:
        """
        Experience earned by a batch of new sets.

        The volume bonus uses the volume of this batch only, not the history.

        Args:
            new_sets: Sets added by this call.

        Returns:
            Experience points.
        """
        batch = list(new_sets)
        volume_bonus = math.floor(total_volume(batch) / self.config.volume_unit)
        return len(batch) * self.config.xp_per_set + volume_bonus * self.config.xp_per_volume_unit

    def xp_for_logs(self, new_logs: Iterable[DailyLog]) -> int:
        """
        Experience earned by logs recorded for the first time.

        Args:
            new_logs: Logs for dates that were not recorded before.

        Returns:
            Experience points.
        """
        xp = 0
        for log in new_logs:
            if log.has_sleep_signal:
                xp += self.config.xp_per_sleep_log
            xp += log.meals_logged * self.config.xp_per_meal_logged
            xp += log.supplements_taken * self.config.xp_per_supplement
        return xp

    def add_xp(self, character: Character, amount: int) -> Character:
        """
        Apply experience and level up as many times as needed.

        Args:
            character: Current character.
            amount: Experience to add; negative amounts are ignored.

        Returns:
            Updated character with ``xp < xp_to_next_level``.

        Raises:
            InvariantViolationError: If the leveling invariant does not hold afterwards.
        """
        xp = character.xp + max(int(amount), 0)
        level = character.level
        threshold = self.xp_to_next_level(level)

        while xp >= threshold:
            xp -= threshold
            level += 1
            threshold = self.xp_to_next_level(level)

        if not 0 <= xp < threshold:
            raise InvariantViolationError(
                f"Leveling left xp={xp} outside [0, {threshold}) at level {level}"
            )

        if level > character.level:
            logger.info(f"{character.name} reached level {level}")

        return character.model_copy(
            update={"xp": xp, "level": level, "xp_to_next_level": threshold}
        )

    # Quests and achievements

    def update_quest_progress(self, quests: list[Quest], ctx: EvaluationContext) -> QuestUpdate:
        """
        Recompute progress of every incomplete quest from the full history.

        Completed quests are left untouched. A quest whose progress reaches its
        target completes and pays its reward in this call only.

        Args:
            quests: Current quests.
            ctx: Evaluation context over the merged state.

        Returns:
            Updated quests, experience earned and newly completed quests.
        """
        updated: list[Quest] = []
        completed: list[Quest] = []
        xp_earned = 0

        for quest in quests:
            if quest.completed:
                updated.append(quest)
                continue

            definition = QUEST_REGISTRY.get(quest.id)
            progress = definition.progress(ctx) if definition else quest.progress
            clamped = min(max(progress, 0), quest.target)

            if progress >= quest.target:
                quest = quest.model_copy(
                    update={"progress": clamped, "completed": True, "completed_at": ctx.now}
                )
                xp_earned += quest.xp_reward
                completed.append(quest)
                logger.info(f"Quest completed: {quest.id} (+{quest.xp_reward} XP)")
            elif clamped != quest.progress:
                quest = quest.model_copy(update={"progress": clamped})

            updated.append(quest)

        return QuestUpdate(quests=updated, xp_earned=xp_earned, completed=completed)

    def check_achievements(
        self, achievements: list[Achievement], ctx: EvaluationContext
    ) -> AchievementUpdate:
        """
        Unlock every locked achievement whose predicate now holds.

        Args:
            achievements: Current achievements.
            ctx: Evaluation context over the merged state.

        Returns:
            Updated achievements and the ones unlocked by this call.
        """
        updated: list[Achievement] = []
        unlocked: list[Achievement] = []

        for achievement in achievements:
            definition = ACHIEVEMENT_REGISTRY.get(achievement.id)
            if achievement.unlocked or definition is None or not definition.unlocks(ctx):
                updated.append(achievement)
                continue

            achievement = achievement.model_copy(update={"unlocked": True, "unlocked_at": ctx.now})
            unlocked.append(achievement)
            updated.append(achievement)
            logger.info(f"Achievement unlocked: {achievement.id}")

        return AchievementUpdate(achievements=updated, unlocked=unlocked)

    def _settle(
        self, previous: GameState, state: GameState, xp: int, now: datetime | None
    ) -> ProgressionOutcome:
        """Apply ``xp``, then quest progress, then achievements, on the merged ``state``."""
        moment = self._resolve_now(now)

        character = self.add_xp(state.character, xp)
        state = state.model_copy(update={"character": character})

        quest_update = self.update_quest_progress(
            state.quests, EvaluationContext.from_state(state, moment)
        )
        character = self.add_xp(state.character, quest_update.xp_earned)
        state = state.model_copy(update={"character": character, "quests": quest_update.quests})

        achievement_update = self.check_achievements(
            state.achievements, EvaluationContext.from_state(state, moment)
        )
        state = state.model_copy(update={"achievements": achievement_update.achievements})

        return ProgressionOutcome(
            state=state,
            xp_awarded=xp + quest_update.xp_earned,
            levels_gained=state.character.level - previous.character.level,
            completed_quests=quest_update.completed,
            unlocked_achievements=achievement_update.unlocked,
        )

    # State transitions

    def create_character(self, name: str = DEFAULT_CHARACTER_NAME) -> Character:
        """Create a level 1 character."""
        return Character(name=name, xp_to_next_level=self.xp_to_next_level(1))

    def create_initial_state(self, name: str = DEFAULT_CHARACTER_NAME) -> GameState:
        """Create an empty state with the full quest and achievement catalogs."""
        return GameState(
            character=self.create_character(name),
            quests=create_default_quests(),
            achievements=create_default_achievements(),
        )

    def _with_set_totals(self, character: Character, sets: list[WorkoutSet]) -> Character:
        return character.model_copy(
            update={
                "total_workouts": len(group_sets_into_workouts(sets)),
                "total_sets": len(sets),
                "total_weight": total_volume(sets),
            }
        )

    def initialize_character(self, state: GameState, name: str) -> GameState:
        """
        Replace the character with a fresh one named ``name``.

        Args:
            state: Current state.
            name: Character name.

        Returns:
            State with the new character; aggregates reflect the existing sets.
        """
        character = self._with_set_totals(self.create_character(name), state.sets)
        return state.model_copy(update={"character": character})

    def apply_sets(
        self, state: GameState, new_sets: Iterable[WorkoutSet], now: datetime | None = None
    ) -> ProgressionOutcome:
        """
        Add workout sets and award their experience.

        Sets already present (by date, exercise, weight, reps) are ignored; with
        nothing new the call is a no-op.

        Args:
            state: Current state.
            new_sets: Candidate sets.
            now: Evaluation time; defaults to the current time.

        Returns:
            Progression outcome.
        """
        fresh = filter_new_sets(new_sets, state.sets)
        if not fresh:
            return ProgressionOutcome.unchanged(state)

        all_sets = [*state.sets, *fresh]
        character = self._with_set_totals(state.character, all_sets)
        merged = state.model_copy(update={"sets": all_sets, "character": character})

        return self._settle(state, merged, self.xp_for_sets(fresh), now)

    def apply_logs(
        self, state: GameState, new_logs: Iterable[DailyLog], now: datetime | None = None
    ) -> ProgressionOutcome:
        """
        Add daily logs for dates not yet recorded and award their experience.

        Args:
            state: Current state.
            new_logs: Candidate logs; logs for known dates are ignored.
            now: Evaluation time; defaults to the current time.

        Returns:
            Progression outcome.
        """
        fresh = filter_new_logs(new_logs, state.daily_logs)
        if not fresh:
            return ProgressionOutcome.unchanged(state)

        merged = state.model_copy(update={"daily_logs": sort_logs([*state.daily_logs, *fresh])})

        return self._settle(state, merged, self.xp_for_logs(fresh), now)

    def apply_log_update(
        self, state: GameState, log: DailyLog, now: datetime | None = None
    ) -> ProgressionOutcome:
        """
        Add a single log, merging it into the stored log of the same date.

        Experience is only awarded the first time a date is recorded; filling in
        more fields later earns nothing.

        Args:
            state: Current state.
            log: Incoming, possibly partial, log.
            now: Evaluation time; defaults to the current time.

        Returns:
            Progression outcome.
        """
        logs, is_new = upsert_daily_log(state.daily_logs, log)
        merged = state.model_copy(update={"daily_logs": logs})
        xp = self.xp_for_logs([log]) if is_new else 0

        return self._settle(state, merged, xp, now)

    def apply_remote(
        self,
        state: GameState,
        remote_sets: Iterable[WorkoutSet],
        remote_logs: Iterable[DailyLog],
        now: datetime | None = None,
    ) -> ProgressionOutcome:
        """
        Fold rows pulled from the remote mirror into the state in one transition.

        Sets and logs are merged first, then experience, quests and achievements
        are settled once on the result.

        Args:
            state: Current state.
            remote_sets: Sets read from the mirror.
            remote_logs: Logs read from the mirror, at most one per date.
            now: Evaluation time; defaults to the current time.

        Returns:
            Progression outcome; a no-op when the mirror adds nothing.
        """
        remote_logs = list(remote_logs)
        fresh_sets = filter_new_sets(remote_sets, state.sets)
        fresh_logs = filter_new_logs(remote_logs, state.daily_logs)
        fresh_dates = {log.date for log in fresh_logs}

        logs = sort_logs([*state.daily_logs, *fresh_logs])
        for log in remote_logs:
            if log.date not in fresh_dates:
                logs, _ = upsert_daily_log(logs, log)

        if not fresh_sets and logs == sort_logs(state.daily_logs):
            return ProgressionOutcome.unchanged(state)

        all_sets = [*state.sets, *fresh_sets]
        character = self._with_set_totals(state.character, all_sets)
        merged = state.model_copy(
            update={"sets": all_sets, "daily_logs": logs, "character": character}
        )
        xp = self.xp_for_sets(fresh_sets) + self.xp_for_logs(fresh_logs)

        return self._settle(state, merged, xp, now)

    def apply_exercise_rename(
        self,
        state: GameState,
        old_names: Iterable[str],
        new_name: str,
        now: datetime | None = None,
    ) -> ProgressionOutcome:
        """
        Rewrite the exercise name of every set using one of ``old_names``.

        No experience is awarded.

        Args:
            state: Current state.
            old_names: Exercise names to replace.
            new_name: Replacement name.
            now: Evaluation time; defaults to the current time.

        Returns:
            Progression outcome; a no-op when no set matches.
        """
        target = new_name.strip()
        renamed = {name for name in old_names if name != target}
        if not target or not any(s.exercise in renamed for s in state.sets):
            return ProgressionOutcome.unchanged(state)

        sets = [
            s.model_copy(update={"exercise": target}) if s.exercise in renamed else s
            for s in state.sets
        ]
        character = self._with_set_totals(state.character, sets)
        merged = state.model_copy(update={"sets": sets, "character": character})

        return self._settle(state, merged, 0, now)
