"""
Set import service.

Maps spreadsheet rows onto workout sets and drops every row that repeats a
fact already in the history or earlier in the same batch.
"""

import logging
from collections.abc import Iterable, Mapping

from fitness_rpg_ledger.domain.records import SetColumnMapping, SetKey, WorkoutSet, set_key
from fitness_rpg_ledger.utils.hashing import generate_set_id
from fitness_rpg_ledger.utils.normalization import normalize_date, parse_number
from fitness_rpg_ledger.utils.parameters import ProcessingConfig

logger = logging.getLogger(__name__)


class SetImporter:
    """
    Importer for workout set rows.

    Rows missing a date or exercise, or whose date cannot be parsed, are
    skipped. Malformed weight or reps fall back to zero instead of losing the row.
    """

    def __init__(self, config: ProcessingConfig | None = None) -> None:
        """
        Initialize set importer.

        Args:
            config: Processing configuration (for set ID generation).
        """
        self.config = config or ProcessingConfig()

    def _safe_weight(self, raw: str | None) -> float:
        weight = parse_number(raw)
        if weight is None or weight < 0:
            return 0.0
        return weight

    def _safe_reps(self, raw: str | None) -> int:
        reps = parse_number(raw)
        if reps is None or reps < 0:
            return 0
        return int(reps)

    def build_set(self, date: str, exercise: str, weight: float, reps: int) -> WorkoutSet:
        """
        Create a set with a deterministic ID.

        Args:
            date: ISO calendar date.
            exercise: Exercise name.
            weight: Weight lifted.
            reps: Repetitions.

        Returns:
            New workout set.
        """
        return WorkoutSet(
            id=generate_set_id(date, exercise, weight, reps, self.config.set_id),
            date=date,
            exercise=exercise,
            weight=weight,
            reps=reps,
        )

    def map_rows(
        self,
        rows: Iterable[Mapping[str, str]],
        mapping: SetColumnMapping,
        existing_sets: Iterable[WorkoutSet],
    ) -> list[WorkoutSet]:
        """
        Map raw rows into new workout sets.

        Args:
            rows: Rows as column name to cell value.
            mapping: Columns holding date, exercise, weight and reps.
            existing_sets: Current set collection, used for deduplication.

        Returns:
            Sets not already present, in row order.
        """
        known: set[SetKey] = {s.key for s in existing_sets}
        new_sets: list[WorkoutSet] = []
        skipped = 0
        duplicates = 0

        for idx, row in enumerate(rows):
            date_value = row.get(mapping.date)
            exercise = (row.get(mapping.exercise) or "").strip()

            if not date_value or not exercise:
                skipped += 1
                continue

            date = normalize_date(date_value)
            if date is None:
                logger.debug(f"Row {idx}: unparseable date {date_value!r}, skipping")
                skipped += 1
                continue

            weight = self._safe_weight(row.get(mapping.weight))
            reps = self._safe_reps(row.get(mapping.reps))

            key = set_key(date, exercise, weight, reps)
            if key in known:
                duplicates += 1
                continue

            new_sets.append(self.build_set(date, exercise, weight, reps))
            known.add(key)

        logger.info(
            f"Mapped {len(new_sets)} new sets "
            f"({duplicates} duplicates dropped, {skipped} rows skipped)"
        )
        return new_sets


def filter_new_sets(
    candidates: Iterable[WorkoutSet], existing_sets: Iterable[WorkoutSet]
) -> list[WorkoutSet]:
    """
    Keep only sets whose identity is not already known.

    Args:
        candidates: Sets to add, e.g. fetched from the remote mirror.
        existing_sets: Current set collection.

    Returns:
        Candidates that are new facts, first occurrence wins within the batch.
    """
    known: set[SetKey] = {s.key for s in existing_sets}
    fresh: list[WorkoutSet] = []

    for candidate in candidates:
        if candidate.key in known:
            continue
        fresh.append(candidate)
        known.add(candidate.key)

    return fresh
