"""
Achievement catalog.

Maps each achievement to the predicate that unlocks it. Predicates look at the
whole current state through the evaluation context.
"""

from collections.abc import Callable
from dataclasses import dataclass

from fitness_rpg_ledger.domain.progression import Achievement, Category
from fitness_rpg_ledger.services.evaluation_context import EvaluationContext

AchievementPredicate = Callable[[EvaluationContext], bool]


@dataclass(frozen=True)
class AchievementDefinition:
    """Static description of an achievement plus its unlock predicate."""

    id: str
    title: str
    description: str
    icon: str
    category: Category
    unlocks: AchievementPredicate

    def create(self) -> Achievement:
        """Create a locked achievement from this definition."""
        return Achievement(
            id=self.id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            category=self.category,
        )


def _define(
    achievement_id: str,
    title: str,
    description: str,
    icon: str,
    category: Category,
    unlocks: AchievementPredicate,
) -> AchievementDefinition:
    return AchievementDefinition(achievement_id, title, description, icon, category, unlocks)


_DEFINITIONS = [
    # Workout
    _define(
        "first-workout", "First Blood", "Complete your first workout", "🏋️",
        Category.WORKOUT, lambda ctx: len(ctx.workouts) >= 1,
    ),
    _define(
        "variety-5", "Well Rounded", "Train 5 different exercises", "🎯",
        Category.WORKOUT, lambda ctx: len(ctx.unique_exercises) >= 5,
    ),
    _define(
        "century-sets", "Century", "Log 100 sets", "💯",
        Category.WORKOUT, lambda ctx: len(ctx.sets) >= 100,
    ),
    _define(
        "volume-king", "Volume King", "Move 100,000 total weight", "👑",
        Category.WORKOUT, lambda ctx: ctx.character.total_weight >= 100_000,
    ),
    # Level
    _define(
        "level-5", "Apprentice", "Reach level 5", "⭐",
        Category.GENERAL, lambda ctx: ctx.character.level >= 5,
    ),
    _define(
        "level-10", "Veteran", "Reach level 10", "🌟",
        Category.GENERAL, lambda ctx: ctx.character.level >= 10,
    ),
    _define(
        "level-25", "Legend", "Reach level 25", "🏆",
        Category.GENERAL, lambda ctx: ctx.character.level >= 25,
    ),
    # Sleep
    _define(
        "first-sleep-log", "Dreamer", "Log your sleep for the first time", "😴",
        Category.SLEEP, lambda ctx: any(log.has_sleep_signal for log in ctx.daily_logs),
    ),
    _define(
        "sleep-streak-7", "Sleep Routine", "Log sleep 7 days in a row", "🌙",
        Category.SLEEP, lambda ctx: ctx.sleep_streak >= 7,
    ),
    _define(
        "sleep-streak-30", "Sleep Master", "Log sleep 30 days in a row", "🛌",
        Category.SLEEP, lambda ctx: ctx.sleep_streak >= 30,
    ),
    _define(
        "perfect-sleep-score", "Perfect Night", "Reach a sleep score of 90 or more", "✨",
        Category.SLEEP,
        lambda ctx: any(log.sleep_score and log.sleep_score >= 90 for log in ctx.daily_logs),
    ),
    # Nutrition
    _define(
        "first-meal-log", "Food Logger", "Log a meal for the first time", "🍽️",
        Category.NUTRITION, lambda ctx: ctx.days_with_meals > 0,
    ),
    _define(
        "supplement-streak-7", "Stacked Week", "Take all supplements 7 days in a row", "💊",
        Category.NUTRITION, lambda ctx: ctx.supplement_streak >= 7,
    ),
    _define(
        "supplement-streak-30", "Stacked Month", "Take all supplements 30 days in a row", "🧪",
        Category.NUTRITION, lambda ctx: ctx.supplement_streak >= 30,
    ),
    _define(
        "meal-logger-100", "Nutrition Nerd", "Log meals on 100 days", "🥗",
        Category.NUTRITION, lambda ctx: ctx.days_with_meals >= 100,
    ),
    # General
    # Needs stored quests beyond the fixed catalog to unlock.
    _define(
        "quest-master", "Quest Master", "Complete 50 quests", "📜",
        Category.GENERAL, lambda ctx: ctx.completed_quest_count >= 50,
    ),
]

ACHIEVEMENT_REGISTRY: dict[str, AchievementDefinition] = {d.id: d for d in _DEFINITIONS}


def create_default_achievements() -> list[Achievement]:
    """Create the full, locked achievement list for a new character."""
    return [definition.create() for definition in ACHIEVEMENT_REGISTRY.values()]
