"""
Tracking record models and import column mappings.

Defines the canonical schema for workout sets, derived workouts and daily
lifestyle logs. Models are immutable; every change produces a new instance.
Attributes are snake_case and serialize with camelCase aliases, which is the
shape of the persisted snapshot.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TAKEN_MARKER = "taken"

RECORD_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

SetKey = tuple[str, str, float, int]


class WorkoutSet(BaseModel):
    """
    A single performed set.

    Two sets with equal (date, exercise, weight, reps) are the same fact even
    when their IDs differ.
    """

    id: str = Field(description="Set identifier")
    date: str = Field(pattern=ISO_DATE_PATTERN, description="ISO calendar date")
    exercise: str = Field(description="Free-text exercise name")
    weight: float = Field(0.0, ge=0, description="Weight lifted")
    reps: int = Field(0, ge=0, description="Repetitions performed")

    model_config = RECORD_MODEL_CONFIG

    @property
    def key(self) -> SetKey:
        """Deduplication identity of the set."""
        return set_key(self.date, self.exercise, self.weight, self.reps)

    @property
    def volume(self) -> float:
        """Weight multiplied by reps."""
        return self.weight * self.reps


def set_key(date: str, exercise: str, weight: float, reps: int) -> SetKey:
    """Build the deduplication identity for a set."""
    return (date, exercise, float(weight), int(reps))


class Workout(BaseModel):
    """All sets performed on one date. Derived from the set collection, never stored."""

    date: str
    sets: list[WorkoutSet]
    total_volume: float
    exercises: list[str]

    model_config = RECORD_MODEL_CONFIG


def _is_logged_text(value: str | None) -> bool:
    if value is None:
        return False
    stripped = value.strip()
    return bool(stripped) and stripped != "-"


class DailyLog(BaseModel):
    """
    Sleep, meals and supplements recorded for one calendar date.

    ``meals_logged``, ``supplements_taken`` and ``supplements_total`` are
    computed from the meal and supplement fields on every access, so they
    cannot drift. They are still written to the snapshot for readers of the
    serialized form and ignored when a snapshot is loaded back.
    """

    date: str = Field(pattern=ISO_DATE_PATTERN, description="ISO calendar date")

    bedtime: str | None = None
    wake_time: str | None = None
    sleep_duration: int | None = Field(None, ge=0, description="Sleep duration in minutes")
    sleep_score: float | None = Field(None, description="Sleep quality score (0-100)")
    rem_minutes: int | None = Field(None, ge=0, description="REM sleep in minutes")
    sleep_notes: str | None = None

    meal1: str | None = None
    meal2: str | None = None
    meal3: str | None = None
    snacks: str | None = None

    supplements: dict[str, str] = Field(
        default_factory=dict,
        description="Supplement name to dose; an empty dose means not taken",
    )

    model_config = RECORD_MODEL_CONFIG

    @field_validator("supplements", mode="before")
    @classmethod
    def _coerce_doses(cls, value: Any) -> Any:
        # Older snapshots store taken/not-taken as booleans.
        if not isinstance(value, dict):
            return value
        coerced: dict[str, str] = {}
        for name, dose in value.items():
            if dose is True:
                coerced[str(name)] = TAKEN_MARKER
            elif dose is None or dose is False:
                coerced[str(name)] = ""
            else:
                coerced[str(name)] = str(dose)
        return coerced

    @computed_field(alias="mealsLogged")  # type: ignore[prop-decorator]
    @property
    def meals_logged(self) -> int:
        """Number of the three named meals that are filled in (snacks excluded)."""
        return sum(1 for meal in (self.meal1, self.meal2, self.meal3) if _is_logged_text(meal))

    @computed_field(alias="supplementsTaken")  # type: ignore[prop-decorator]
    @property
    def supplements_taken(self) -> int:
        """Number of supplements with a non-empty dose."""
        return sum(1 for dose in self.supplements.values() if dose)

    @computed_field(alias="supplementsTotal")  # type: ignore[prop-decorator]
    @property
    def supplements_total(self) -> int:
        """Number of supplements tracked on this date."""
        return len(self.supplements)

    @property
    def has_sleep_signal(self) -> bool:
        """True when a sleep duration or score was recorded."""
        return bool(self.sleep_duration or self.sleep_score)

    @property
    def is_supplement_adherent(self) -> bool:
        """True when every tracked supplement was taken."""
        return self.supplements_taken >= self.supplements_total


class SetColumnMapping(BaseModel):
    """Source column names holding each workout set field."""

    date: str
    exercise: str
    weight: str
    reps: str

    model_config = RECORD_MODEL_CONFIG


class LogColumnMapping(BaseModel):
    """Source column names holding each daily log field. Only ``date`` is required."""

    date: str
    sleep_duration: str | None = None
    sleep_score: str | None = None
    wake_time: str | None = None
    meal1: str | None = None
    meal2: str | None = None
    meal3: str | None = None
    snacks: str | None = None
    supplements: list[str] = Field(
        default_factory=list, description="Columns that each hold one supplement"
    )

    model_config = RECORD_MODEL_CONFIG
