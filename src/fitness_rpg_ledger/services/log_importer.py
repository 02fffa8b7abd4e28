"""
Daily log import service.

Maps spreadsheet rows onto daily logs (sleep, meals, supplements). An import
only ever adds dates that are not yet recorded; it never updates an existing one.
"""

import logging
from collections.abc import Iterable, Mapping

from fitness_rpg_ledger.domain.records import TAKEN_MARKER, DailyLog, LogColumnMapping
from fitness_rpg_ledger.utils.normalization import normalize_date, parse_duration, parse_number

logger = logging.getLogger(__name__)

NOT_TAKEN_VALUES = frozenset({"", "-", "0", "no"})


def is_supplement_taken(raw: str | None) -> bool:
    """
    Decide whether a supplement cell means the supplement was taken.

    Args:
        raw: Raw cell value.

    Returns:
        False for empty, ``-``, ``0`` or ``no`` (any case); True otherwise.
    """
    if raw is None:
        return False
    return raw.strip().lower() not in NOT_TAKEN_VALUES


def _meal_value(row: Mapping[str, str], column: str | None) -> str | None:
    if not column:
        return None
    value = (row.get(column) or "").strip()
    if not value or value == "-":
        return None
    return value


def _non_negative(value: int | None) -> int | None:
    if value is None or value < 0:
        return None
    return value


def _text_value(row: Mapping[str, str], column: str | None) -> str | None:
    if not column:
        return None
    value = (row.get(column) or "").strip()
    return value or None


class LogImporter:
    """Importer for daily lifestyle rows."""

    def row_to_log(self, date: str, row: Mapping[str, str], mapping: LogColumnMapping) -> DailyLog:
        """
        Build the daily log for one row whose date is already normalized.

        Args:
            date: ISO calendar date.
            row: Row as column name to cell value.
            mapping: Column mapping.

        Returns:
            Daily log.
        """
        supplements = {
            column: TAKEN_MARKER if is_supplement_taken(row.get(column)) else ""
            for column in mapping.supplements
        }

        score = parse_number(row.get(mapping.sleep_score)) if mapping.sleep_score else None

        return DailyLog(
            date=date,
            sleep_duration=(
                _non_negative(parse_duration(row.get(mapping.sleep_duration)))
                if mapping.sleep_duration
                else None
            ),
            sleep_score=score,
            wake_time=_text_value(row, mapping.wake_time),
            meal1=_meal_value(row, mapping.meal1),
            meal2=_meal_value(row, mapping.meal2),
            meal3=_meal_value(row, mapping.meal3),
            snacks=_meal_value(row, mapping.snacks),
            supplements=supplements,
        )

    def map_rows(
        self,
        rows: Iterable[Mapping[str, str]],
        mapping: LogColumnMapping,
        existing_logs: Iterable[DailyLog],
    ) -> list[DailyLog]:
        """
        Map raw rows into daily logs for dates not yet recorded.

        Args:
            rows: Rows as column name to cell value.
            mapping: Column mapping; only ``date`` is required.
            existing_logs: Current log collection, used for deduplication by date.

        Returns:
            New daily logs, in row order.
        """
        known_dates = {log.date for log in existing_logs}
        new_logs: list[DailyLog] = []
        skipped = 0

        for idx, row in enumerate(rows):
            date_value = row.get(mapping.date)
            date = normalize_date(date_value) if date_value else None

            if date is None:
                logger.debug(f"Row {idx}: missing or unparseable date {date_value!r}, skipping")
                skipped += 1
                continue

            if date in known_dates:
                continue

            new_logs.append(self.row_to_log(date, row, mapping))
            known_dates.add(date)

        logger.info(f"Mapped {len(new_logs)} new daily logs ({skipped} rows skipped)")
        return new_logs


def filter_new_logs(
    candidates: Iterable[DailyLog], existing_logs: Iterable[DailyLog]
) -> list[DailyLog]:
    """
    Keep only logs for dates that are not yet recorded.

    Args:
        candidates: Logs to add.
        existing_logs: Current log collection.

    Returns:
        Logs for new dates, first occurrence wins within the batch.
    """
    known_dates = {log.date for log in existing_logs}
    fresh: list[DailyLog] = []

    for candidate in candidates:
        if candidate.date in known_dates:
            continue
        fresh.append(candidate)
        known_dates.add(candidate.date)

    return fresh
