"""
Persistence gateway.

Single entry point for everything that leaves the process: the local JSON
snapshot and the optional remote mirror. Local writes are synchronous and
authoritative. Remote writes are fire-and-forget: they run on a single
background worker, and a failure is logged without touching local state.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from fitness_rpg_ledger.domain.progression import GameState
from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet
from fitness_rpg_ledger.infrastructure.remote_client.client import RemoteMirrorClient
from fitness_rpg_ledger.infrastructure.storage.state_store import StateStore
from fitness_rpg_ledger.services.daily_log_merger import merge_daily_log, sort_logs
from fitness_rpg_ledger.utils.exceptions import RemoteStoreError

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Local snapshot store plus optional remote mirror."""

    def __init__(
        self,
        store: StateStore,
        remote: RemoteMirrorClient | None = None,
        background_writes: bool = True,
    ) -> None:
        """
        Initialize persistence gateway.

        Args:
            store: Local snapshot store.
            remote: Remote mirror client; None disables mirroring.
            background_writes: Run remote writes on a worker thread instead of inline.
        """
        self.store = store
        self.remote = remote
        self._executor: ThreadPoolExecutor | None = None
        self._pending: list[Future[None]] = []

        if remote is not None and background_writes:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="remote-mirror")

    @property
    def has_remote(self) -> bool:
        """True when a remote mirror is configured."""
        return self.remote is not None

    # Local snapshot

    def load_state(self) -> GameState | None:
        """Load the local snapshot, or None if there is none."""
        return self.store.load()

    def save_state(self, state: GameState) -> None:
        """
        Save the local snapshot.

        Raises:
            StateStoreError: If the snapshot cannot be written.
        """
        self.store.save(state)

    def clear_state(self) -> None:
        """Delete the local snapshot. The remote mirror is left as is."""
        self.store.clear()

    # Remote mirror writes

    def _run_remote(self, description: str, action: Callable[[], None]) -> None:
        try:
            action()
        except RemoteStoreError as e:
            logger.error(f"Remote mirror failed to {description}: {e}")

    def _mirror(self, description: str, action: Callable[[], None]) -> None:
        if self.remote is None:
            return

        if self._executor is None:
            self._run_remote(description, action)
            return

        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(self._run_remote, description, action))

    def mirror_sets(self, sets: list[WorkoutSet]) -> None:
        """Send newly added sets to the remote mirror."""
        if self.remote is None or not sets:
            return
        remote = self.remote
        self._mirror(f"insert {len(sets)} sets", lambda: remote.insert_workout_sets(sets))

    def mirror_daily_log(self, log: DailyLog) -> None:
        """Send a daily log to the remote mirror."""
        if self.remote is None:
            return
        remote = self.remote
        self._mirror(f"upsert daily log {log.date}", lambda: remote.upsert_daily_log(log))

    def mirror_daily_logs(self, logs: list[DailyLog]) -> None:
        """Send several daily logs to the remote mirror."""
        for log in logs:
            self.mirror_daily_log(log)

    def mirror_rename(self, old_names: list[str], new_name: str) -> None:
        """Send an exercise rename to the remote mirror."""
        if self.remote is None or not old_names:
            return
        remote = self.remote
        self._mirror(
            f"rename exercises to {new_name!r}",
            lambda: remote.rename_exercise(old_names, new_name),
        )

    # Remote mirror reads

    def fetch_remote_sets(self) -> list[WorkoutSet]:
        """
        Fetch all sets from the remote mirror.

        Returns:
            Remote sets; empty when no mirror is configured or the fetch fails.
        """
        if self.remote is None:
            return []

        try:
            return self.remote.fetch_workout_sets()
        except RemoteStoreError as e:
            logger.error(f"Failed to fetch remote sets: {e}")
            return []

    def fetch_remote_logs(self) -> list[DailyLog]:
        """
        Fetch sleep, meal and supplement rows and fold them into one log per date.

        A failing table is logged and skipped; the other tables still count.

        Returns:
            Remote logs, most recent first.
        """
        if self.remote is None:
            return []

        fetchers = {
            "sleep": self.remote.fetch_sleep,
            "meals": self.remote.fetch_meals,
            "supplements": self.remote.fetch_supplements,
        }
        by_date: dict[str, DailyLog] = {}

        for table, fetch in fetchers.items():
            try:
                partials = fetch()
            except RemoteStoreError as e:
                logger.error(f"Failed to fetch remote {table}: {e}")
                continue

            for partial in partials:
                by_date[partial.date] = merge_daily_log(by_date.get(partial.date), partial)

        return sort_logs(list(by_date.values()))

    # Lifecycle

    def flush(self) -> None:
        """Wait for every pending remote write to finish."""
        pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        """Finish pending remote writes and release resources."""
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self.remote is not None:
            self.remote.close()
