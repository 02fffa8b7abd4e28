"""
Quest catalog.

Each quest is registered with its definition and a progress function over the
evaluation context. New quests are added by registering another function;
nothing else needs to change.
"""

from collections.abc import Callable
from dataclasses import dataclass

from fitness_rpg_ledger.domain.progression import Category, Quest, QuestType
from fitness_rpg_ledger.services.evaluation_context import EvaluationContext
from fitness_rpg_ledger.services.streaks import has_sleep, is_fully_supplemented

GOOD_SLEEP_MINUTES = 480
GOOD_SLEEP_SCORE = 85

QuestProgress = Callable[[EvaluationContext], int]


@dataclass(frozen=True)
class QuestDefinition:
    """Static description of a quest plus its progress function."""

    id: str
    title: str
    description: str
    type: QuestType
    category: Category
    target: int
    xp_reward: int
    progress: QuestProgress

    def create(self) -> Quest:
        """Create a fresh, incomplete quest from this definition."""
        return Quest(
            id=self.id,
            title=self.title,
            description=self.description,
            type=self.type,
            category=self.category,
            target=self.target,
            xp_reward=self.xp_reward,
        )


QUEST_REGISTRY: dict[str, QuestDefinition] = {}


def register_quest(
    quest_id: str,
    title: str,
    description: str,
    quest_type: QuestType,
    category: Category,
    target: int,
    xp_reward: int,
) -> Callable[[QuestProgress], QuestProgress]:
    """Register the decorated function as the progress function of a quest."""

    def decorator(progress: QuestProgress) -> QuestProgress:
        QUEST_REGISTRY[quest_id] = QuestDefinition(
            id=quest_id,
            title=title,
            description=description,
            type=quest_type,
            category=category,
            target=target,
            xp_reward=xp_reward,
            progress=progress,
        )
        return progress

    return decorator


def create_default_quests() -> list[Quest]:
    """Create the full quest list for a new character."""
    return [definition.create() for definition in QUEST_REGISTRY.values()]


# Workout


@register_quest(
    "daily-workout", "Daily Grind", "Complete a workout today",
    QuestType.DAILY, Category.WORKOUT, target=1, xp_reward=25,
)
def _daily_workout(ctx: EvaluationContext) -> int:
    return len(ctx.today_workouts)


@register_quest(
    "weekly-workout-3", "Three a Week", "Complete 3 workouts this week",
    QuestType.WEEKLY, Category.WORKOUT, target=3, xp_reward=100,
)
def _weekly_workouts(ctx: EvaluationContext) -> int:
    return len(ctx.week_workouts)


@register_quest(
    "weekly-sets-50", "Volume Week", "Log 50 sets this week",
    QuestType.WEEKLY, Category.WORKOUT, target=50, xp_reward=150,
)
def _weekly_sets(ctx: EvaluationContext) -> int:
    return sum(len(w.sets) for w in ctx.week_workouts)


@register_quest(
    "monthly-workout-12", "Monthly Regular", "Complete 12 workouts this month",
    QuestType.MONTHLY, Category.WORKOUT, target=12, xp_reward=300,
)
def _monthly_workouts(ctx: EvaluationContext) -> int:
    return len(ctx.month_workouts)


@register_quest(
    "milestone-workouts-100", "Centurion", "Complete 100 workouts",
    QuestType.MILESTONE, Category.WORKOUT, target=100, xp_reward=1000,
)
def _hundred_workouts(ctx: EvaluationContext) -> int:
    return len(ctx.workouts)


# Sleep


@register_quest(
    "daily-sleep-8h", "Full Recharge", "Sleep at least 8 hours tonight",
    QuestType.DAILY, Category.SLEEP, target=1, xp_reward=20,
)
def _daily_long_sleep(ctx: EvaluationContext) -> int:
    log = ctx.today_log
    return int(bool(log and log.sleep_duration and log.sleep_duration >= GOOD_SLEEP_MINUTES))


@register_quest(
    "daily-sleep-score-85", "Quality Rest", "Reach a sleep score of 85 or more",
    QuestType.DAILY, Category.SLEEP, target=1, xp_reward=25,
)
def _daily_sleep_score(ctx: EvaluationContext) -> int:
    log = ctx.today_log
    return int(bool(log and log.sleep_score and log.sleep_score >= GOOD_SLEEP_SCORE))


@register_quest(
    "weekly-sleep-7days", "Sleep Journal", "Log your sleep every day this week",
    QuestType.WEEKLY, Category.SLEEP, target=7, xp_reward=100,
)
def _weekly_sleep_logged(ctx: EvaluationContext) -> int:
    return sum(1 for log in ctx.week_logs if has_sleep(log))


@register_quest(
    "weekly-good-sleep-5", "Well Rested", "Sleep 8 hours or more on 5 nights this week",
    QuestType.WEEKLY, Category.SLEEP, target=5, xp_reward=120,
)
def _weekly_long_sleep(ctx: EvaluationContext) -> int:
    return sum(
        1
        for log in ctx.week_logs
        if log.sleep_duration and log.sleep_duration >= GOOD_SLEEP_MINUTES
    )


# Nutrition


@register_quest(
    "daily-meals-3", "Three Square Meals", "Log 3 meals today",
    QuestType.DAILY, Category.NUTRITION, target=3, xp_reward=20,
)
def _daily_meals(ctx: EvaluationContext) -> int:
    return ctx.today_log.meals_logged if ctx.today_log else 0


@register_quest(
    "daily-supplements", "Stack Complete", "Take all your supplements today",
    QuestType.DAILY, Category.NUTRITION, target=1, xp_reward=15,
)
def _daily_supplements(ctx: EvaluationContext) -> int:
    return int(ctx.today_log is not None and is_fully_supplemented(ctx.today_log))


@register_quest(
    "weekly-meals-logged", "Food Diary", "Log meals every day this week",
    QuestType.WEEKLY, Category.NUTRITION, target=7, xp_reward=80,
)
def _weekly_meal_days(ctx: EvaluationContext) -> int:
    return sum(1 for log in ctx.week_logs if log.meals_logged > 0)


@register_quest(
    "weekly-supplements-7", "Consistent Stack", "Reach a 7-day full supplement streak",
    QuestType.WEEKLY, Category.NUTRITION, target=7, xp_reward=100,
)
def _supplement_streak(ctx: EvaluationContext) -> int:
    return ctx.supplement_streak


@register_quest(
    "monthly-supplement-streak", "Supplement Habit", "Take supplements on 25 days this month",
    QuestType.MONTHLY, Category.NUTRITION, target=25, xp_reward=250,
)
def _monthly_supplement_days(ctx: EvaluationContext) -> int:
    return sum(1 for log in ctx.month_logs if log.supplements_taken > 0)
