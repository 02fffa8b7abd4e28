"""
Remote mirror client implementation.

Talks to a PostgREST-style REST endpoint (for example Supabase) holding one
table per record kind. Reads are paged; writes are plain inserts or upserts.
"""

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet
from fitness_rpg_ledger.infrastructure.remote_client.rows import (
    log_to_meal_rows,
    log_to_sleep_row,
    log_to_supplement_rows,
    meal_rows_to_logs,
    row_to_set,
    set_to_row,
    sleep_row_to_log,
    supplement_rows_to_logs,
)
from fitness_rpg_ledger.utils.exceptions import ConfigurationError, RemoteStoreError
from fitness_rpg_ledger.utils.parameters import RemoteConfig, SetIDConfig

logger = logging.getLogger(__name__)

SLEEP_CONFLICT_COLUMNS = "user_id,date"
MEALS_CONFLICT_COLUMNS = "user_id,date,meal_type"
SUPPLEMENTS_CONFLICT_COLUMNS = "user_id,date,supplement"
SLEEP_COLUMNS = "date,bedtime,wake_time,duration_hours,quality,rem,notes"


def in_filter(values: Iterable[str]) -> str:
    """Build a PostgREST ``in.(...)`` filter with quoted values."""
    quoted = []
    for value in values:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        quoted.append(f'"{escaped}"')
    return f"in.({','.join(quoted)})"


class RemoteMirrorClient:
    """
    Client for the remote record store.

    Every failure (transport or HTTP status) is raised as RemoteStoreError.
    """

    def __init__(
        self,
        config: RemoteConfig,
        id_config: SetIDConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize remote client.

        Args:
            config: Remote configuration.
            id_config: Set ID configuration for rows without an ID.
            transport: Optional httpx transport (used by tests).

        Raises:
            ConfigurationError: If no base URL is configured.
        """
        if not config.base_url:
            raise ConfigurationError("Remote mirror enabled without a base_url")

        self.config = config
        self.tables = config.tables
        self.id_config = id_config or SetIDConfig()
        self.client = httpx.Client(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout_seconds,
            headers={
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()

    def _request(self, method: str, table: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.client.request(method, f"/{table}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e
        return response

    def _fetch_all(self, table: str, columns: str, order: str) -> list[dict[str, Any]]:
        """
        Fetch every row of a table, one page at a time.

        Args:
            table: Table name.
            columns: Comma-separated columns to select.
            order: PostgREST order expression.

        Returns:
            All rows.

        Raises:
            RemoteStoreError: If any page fails.
        """
        rows: list[dict[str, Any]] = []
        offset = 0
        page_size = self.config.page_size

        while True:
            response = self._request(
                "GET",
                table,
                params={"select": columns, "order": order, "offset": offset, "limit": page_size},
            )
            try:
                page = response.json()
            except ValueError as e:
                raise RemoteStoreError(f"GET {table} returned a body that is not JSON") from e
            if not page:
                break

            rows.extend(page)
            if len(page) < page_size:
                break
            offset += page_size

        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    def _upsert(self, table: str, rows: list[dict[str, Any]], on_conflict: str) -> None:
        self._request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            json=rows,
        )

    # Reads

    def fetch_workout_sets(self) -> list[WorkoutSet]:
        """Fetch all workout sets, oldest row first."""
        rows = self._fetch_all(self.tables.workouts, "*", "id.asc")
        sets = [row_to_set(row, self.id_config) for row in rows]
        return [s for s in sets if s is not None]

    def fetch_sleep(self) -> list[DailyLog]:
        """Fetch sleep rows as partial daily logs."""
        rows = self._fetch_all(self.tables.sleep, SLEEP_COLUMNS, "date.desc")
        logs = [sleep_row_to_log(row) for row in rows]
        return [log for log in logs if log is not None]

    def fetch_meals(self) -> list[DailyLog]:
        """Fetch meal rows grouped into one partial daily log per date."""
        rows = self._fetch_all(self.tables.meals, "date,meal_type,food", "date.desc")
        return meal_rows_to_logs(rows)

    def fetch_supplements(self) -> list[DailyLog]:
        """Fetch supplement rows grouped into one partial daily log per date."""
        return supplement_rows_to_logs(
            self._fetch_all(self.tables.supplements, "date,supplement,dose", "date.desc")
        )

    # Writes

    def insert_workout_sets(self, sets: list[WorkoutSet]) -> None:
        """Insert workout sets."""
        if not sets:
            return
        self._request(
            "POST",
            self.tables.workouts,
            headers={"Prefer": "return=minimal"},
            json=[set_to_row(s) for s in sets],
        )
        logger.info(f"Mirrored {len(sets)} sets")

    def upsert_daily_log(self, log: DailyLog) -> None:
        """Upsert the sleep, meal and supplement rows of a daily log."""
        sleep_row = log_to_sleep_row(log)
        if sleep_row:
            self._upsert(self.tables.sleep, [sleep_row], SLEEP_CONFLICT_COLUMNS)

        meal_rows = log_to_meal_rows(log)
        if meal_rows:
            self._upsert(self.tables.meals, meal_rows, MEALS_CONFLICT_COLUMNS)

        supplement_rows = log_to_supplement_rows(log)
        if supplement_rows:
            self._upsert(self.tables.supplements, supplement_rows, SUPPLEMENTS_CONFLICT_COLUMNS)

        logger.info(f"Mirrored daily log {log.date}")

    def rename_exercise(self, old_names: list[str], new_name: str) -> None:
        """Rename every remote set whose exercise is one of ``old_names``."""
        if not old_names:
            return
        self._request(
            "PATCH",
            self.tables.workouts,
            params={"exercise": in_filter(old_names)},
            headers={"Prefer": "return=minimal"},
            json={"exercise": new_name},
        )
        logger.info(f"Renamed {len(old_names)} exercises to {new_name!r} remotely")
