"""
Progression domain models.

Character, quests, achievements and the aggregate game state that is loaded at
startup and saved after every mutation.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet

PROGRESSION_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
)

DEFAULT_CHARACTER_NAME = "Hero"


class QuestType(str, Enum):
    """Quest cadence. Informational only."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    MILESTONE = "milestone"


class Category(str, Enum):
    """Area of life a quest or achievement belongs to."""

    WORKOUT = "workout"
    SLEEP = "sleep"
    NUTRITION = "nutrition"
    GENERAL = "general"


class Character(BaseModel):
    """
    The player character.

    ``xp`` is always strictly below ``xp_to_next_level`` once experience has been
    applied; the aggregates mirror the current set collection.
    """

    name: str = DEFAULT_CHARACTER_NAME
    level: int = Field(1, ge=1)
    xp: int = Field(0, ge=0)
    xp_to_next_level: int = Field(100, gt=0)
    total_workouts: int = Field(0, ge=0)
    total_sets: int = Field(0, ge=0)
    total_weight: float = Field(0.0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = PROGRESSION_MODEL_CONFIG


class Quest(BaseModel):
    """A goal whose progress is recomputed from history until it completes."""

    id: str
    title: str
    description: str
    type: QuestType
    category: Category
    target: int = Field(gt=0)
    progress: int = Field(0, ge=0)
    completed: bool = False
    xp_reward: int = Field(0, ge=0)
    completed_at: datetime | None = None

    model_config = PROGRESSION_MODEL_CONFIG


class Achievement(BaseModel):
    """A badge unlocked once its predicate holds over the whole state."""

    id: str
    title: str
    description: str
    icon: str
    category: Category
    unlocked: bool = False
    unlocked_at: datetime | None = None

    model_config = PROGRESSION_MODEL_CONFIG


class GameState(BaseModel):
    """
    The progression aggregate.

    Owned by a single session; this is also the unit persisted to the local
    snapshot as ``{character, sets, dailyLogs, quests, achievements}``.
    """

    character: Character = Field(default_factory=Character)
    sets: list[WorkoutSet] = Field(default_factory=list)
    daily_logs: list[DailyLog] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)

    model_config = PROGRESSION_MODEL_CONFIG

    def to_json(self) -> str:
        """Serialize the state to its snapshot JSON form."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "GameState":
        """Rebuild a state from its snapshot JSON form."""
        return cls.model_validate_json(payload)

    def log_for(self, date: str) -> DailyLog | None:
        """Get the daily log recorded for ``date``, if any."""
        for log in self.daily_logs:
            if log.date == date:
                return log
        return None
