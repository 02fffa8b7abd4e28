"""
Game session.

Owns the progression aggregate for one user: loads it on start, routes every
change through the progression engine, persists the result locally and hands
new facts to the remote mirror.
"""

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import httpx

from fitness_rpg_ledger.domain.progression import Character, GameState
from fitness_rpg_ledger.domain.records import (
    DailyLog,
    LogColumnMapping,
    SetColumnMapping,
    WorkoutSet,
)
from fitness_rpg_ledger.infrastructure.parsers.csv_reader import CSVReader
from fitness_rpg_ledger.infrastructure.remote_client.client import RemoteMirrorClient
from fitness_rpg_ledger.infrastructure.storage.state_store import StateStore
from fitness_rpg_ledger.services.achievement_catalog import create_default_achievements
from fitness_rpg_ledger.services.log_importer import LogImporter, filter_new_logs
from fitness_rpg_ledger.services.persistence_gateway import PersistenceGateway
from fitness_rpg_ledger.services.progression_engine import ProgressionEngine, ProgressionOutcome
from fitness_rpg_ledger.services.quest_catalog import create_default_quests
from fitness_rpg_ledger.services.set_importer import SetImporter, filter_new_sets
from fitness_rpg_ledger.utils.logging_config import setup_logging
from fitness_rpg_ledger.utils.parameters import AppConfig, ParameterLoader

logger = logging.getLogger(__name__)

# Oldest messages are dropped past this many.
NOTIFICATION_LIMIT = 50


@dataclass(frozen=True)
class ImportResult:
    """Feedback for an import call."""

    count: int
    message: str

    @classmethod
    def of(cls, count: int) -> "ImportResult":
        if count == 0:
            return cls(count=0, message="0 new rows imported")
        return cls(count=count, message=f"{count} rows imported")


def _with_full_catalogs(state: GameState) -> GameState:
    """Append catalog quests and achievements that an older snapshot does not know yet."""
    quest_ids = {q.id for q in state.quests}
    achievement_ids = {a.id for a in state.achievements}

    missing_quests = [q for q in create_default_quests() if q.id not in quest_ids]
    missing_achievements = [
        a for a in create_default_achievements() if a.id not in achievement_ids
    ]
    if not missing_quests and not missing_achievements:
        return state

    logger.info(
        f"Adding {len(missing_quests)} quests and "
        f"{len(missing_achievements)} achievements to loaded state"
    )
    return state.model_copy(
        update={
            "quests": [*state.quests, *missing_quests],
            "achievements": [*state.achievements, *missing_achievements],
        }
    )


class GameSession:
    """
    Explicit owner of the game state with a load/save lifecycle.

    Every mutating operation computes the next state first, then records
    notifications, saves the local snapshot and finally mirrors the new facts
    remotely. An operation that changes nothing does none of these.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        gateway: PersistenceGateway | None = None,
        engine: ProgressionEngine | None = None,
    ) -> None:
        """
        Initialize game session.

        Args:
            config: Application configuration.
            gateway: Persistence gateway; defaults to a local-only store.
            engine: Progression engine; defaults to one built from ``config``.
        """
        self.config = config or AppConfig()
        self.gateway = gateway or PersistenceGateway(StateStore(self.config.storage))
        self.engine = engine or ProgressionEngine(
            self.config.progression, self.config.processing.timezone
        )
        self.set_importer = SetImporter(self.config.processing)
        self.log_importer = LogImporter()
        self.csv_reader = CSVReader(self.config.csv)

        self.notifications: deque[str] = deque(maxlen=NOTIFICATION_LIMIT)
        self._state = self.engine.create_initial_state()

    @classmethod
    def from_config(
        cls, config: AppConfig, transport: httpx.BaseTransport | None = None
    ) -> "GameSession":
        """
        Build a session with the stores described by ``config``.

        Args:
            config: Application configuration.
            transport: Optional httpx transport for the remote mirror.

        Returns:
            Session, not yet loaded.
        """
        remote = None
        if config.remote.enabled:
            remote = RemoteMirrorClient(config.remote, config.processing.set_id, transport)

        gateway = PersistenceGateway(
            StateStore(config.storage),
            remote=remote,
            background_writes=config.remote.background_writes,
        )
        return cls(config=config, gateway=gateway)

    @property
    def state(self) -> GameState:
        """Current game state."""
        return self._state

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Lifecycle

    def load(self) -> GameState:
        """
        Load the saved snapshot; start from a fresh state when there is none.

        Returns:
            Loaded state.
        """
        saved = self.gateway.load_state()
        if saved is None:
            self._state = self.engine.create_initial_state()
        else:
            self._state = _with_full_catalogs(saved)
        return self._state

    def save(self) -> None:
        """Write the current state to the local snapshot."""
        self.gateway.save_state(self._state)

    def close(self) -> None:
        """Wait for pending remote writes and release resources."""
        self.gateway.close()

    def drain_notifications(self) -> list[str]:
        """Return pending notifications, oldest first, and clear them."""
        messages = list(self.notifications)
        self.notifications.clear()
        return messages

    def _notify(self, message: str) -> None:
        logger.info(message)
        self.notifications.append(message)

    def _commit(self, outcome: ProgressionOutcome, messages: Iterable[str] = ()) -> None:
        self._state = outcome.state
        for message in messages:
            self._notify(message)
        for quest in outcome.completed_quests:
            self._notify(f"Quest completed: {quest.title}! +{quest.xp_reward} XP")
        for achievement in outcome.unlocked_achievements:
            self._notify(f"Achievement unlocked: {achievement.icon} {achievement.title}")
        if outcome.levels_gained:
            character = self._state.character
            self._notify(f"Level up! {character.name} is now level {character.level}")
        self.save()

    # Operations

    def initialize_character(self, name: str) -> Character:
        """
        Start over with a new level 1 character named ``name``.

        Recorded sets and logs are kept.

        Args:
            name: Character name.

        Returns:
            The new character.
        """
        self._state = self.engine.initialize_character(self._state, name)
        self.save()
        return self._state.character

    def import_sets(self, sets: Iterable[WorkoutSet], now: datetime | None = None) -> ImportResult:
        """
        Add workout sets that are not recorded yet.

        Args:
            sets: Candidate sets.
            now: Evaluation time; defaults to the current time.

        Returns:
            Import feedback.
        """
        fresh = filter_new_sets(sets, self._state.sets)
        if not fresh:
            return ImportResult.of(0)

        outcome = self.engine.apply_sets(self._state, fresh, now)
        days = len({s.date for s in fresh})
        self._commit(
            outcome,
            [f"Imported {len(fresh)} sets from {days} workout{'s' if days > 1 else ''}!"],
        )
        self.gateway.mirror_sets(fresh)
        return ImportResult.of(len(fresh))

    def import_set_rows(
        self,
        rows: Iterable[Mapping[str, str]],
        mapping: SetColumnMapping,
        now: datetime | None = None,
    ) -> ImportResult:
        """Map spreadsheet rows to sets and import the new ones."""
        return self.import_sets(self.set_importer.map_rows(rows, mapping, self._state.sets), now)

    def import_set_csv(
        self, file_path: Path, mapping: SetColumnMapping, now: datetime | None = None
    ) -> ImportResult:
        """
        Read a CSV export and import its sets.

        Raises:
            ParsingError: If the file cannot be read.
        """
        return self.import_set_rows(self.csv_reader.read(file_path).rows, mapping, now)

    def import_logs(self, logs: Iterable[DailyLog], now: datetime | None = None) -> ImportResult:
        """
        Add daily logs for dates that are not recorded yet.

        Logs for recorded dates are ignored; use ``add_daily_log`` to update one.

        Args:
            logs: Candidate logs.
            now: Evaluation time; defaults to the current time.

        Returns:
            Import feedback.
        """
        fresh = filter_new_logs(logs, self._state.daily_logs)
        if not fresh:
            return ImportResult.of(0)

        outcome = self.engine.apply_logs(self._state, fresh, now)
        self._commit(outcome, [f"Imported {len(fresh)} days of lifestyle data!"])
        self.gateway.mirror_daily_logs(fresh)
        return ImportResult.of(len(fresh))

    def import_log_rows(
        self,
        rows: Iterable[Mapping[str, str]],
        mapping: LogColumnMapping,
        now: datetime | None = None,
    ) -> ImportResult:
        """Map spreadsheet rows to daily logs and import the new ones."""
        return self.import_logs(
            self.log_importer.map_rows(rows, mapping, self._state.daily_logs), now
        )

    def import_log_csv(
        self, file_path: Path, mapping: LogColumnMapping, now: datetime | None = None
    ) -> ImportResult:
        """
        Read a CSV export and import its daily logs.

        Raises:
            ParsingError: If the file cannot be read.
        """
        return self.import_log_rows(self.csv_reader.read(file_path).rows, mapping, now)

    def add_daily_log(self, log: DailyLog, now: datetime | None = None) -> DailyLog:
        """
        Record a (possibly partial) log, merging it into the stored log of its date.

        Args:
            log: Incoming log.
            now: Evaluation time; defaults to the current time.

        Returns:
            The stored log after the merge.
        """
        outcome = self.engine.apply_log_update(self._state, log, now)
        self._commit(outcome, ["Daily log saved!"])

        merged = self._state.log_for(log.date) or log
        self.gateway.mirror_daily_log(merged)
        return merged

    def rename_exercises(
        self, old_names: Iterable[str], new_name: str, now: datetime | None = None
    ) -> int:
        """
        Rename every set whose exercise is one of ``old_names`` to ``new_name``.

        Args:
            old_names: Exercise names to merge.
            new_name: Target exercise name.
            now: Evaluation time; defaults to the current time.

        Returns:
            Number of sets renamed.
        """
        names = [name for name in dict.fromkeys(old_names) if name != new_name.strip()]
        count = sum(1 for s in self._state.sets if s.exercise in names)

        outcome = self.engine.apply_exercise_rename(self._state, names, new_name, now)
        if not outcome.changed:
            return 0

        self._commit(outcome, [f"Renamed {count} sets to {new_name.strip()}"])
        self.gateway.mirror_rename(names, new_name.strip())
        return count

    def sync_from_remote(self, now: datetime | None = None) -> ImportResult:
        """
        Pull the remote mirror into the local state.

        Remote sets and logs go through the same deduplication and merge rules
        as local imports. Nothing pulled is written back to the mirror.

        Args:
            now: Evaluation time; defaults to the current time.

        Returns:
            Feedback counting new sets and newly recorded dates.
        """
        if not self.gateway.has_remote:
            return ImportResult.of(0)

        remote_sets = self.gateway.fetch_remote_sets()
        remote_logs = self.gateway.fetch_remote_logs()
        new_sets = filter_new_sets(remote_sets, self._state.sets)
        new_logs = filter_new_logs(remote_logs, self._state.daily_logs)

        outcome = self.engine.apply_remote(self._state, remote_sets, remote_logs, now)
        if outcome.changed:
            self._commit(outcome)

        count = len(new_sets) + len(new_logs)
        logger.info(f"Remote sync: {len(new_sets)} new sets, {len(new_logs)} new days")
        return ImportResult.of(count)

    def reset_all(self) -> GameState:
        """
        Discard all progress and delete the local snapshot.

        The remote mirror is not touched.

        Returns:
            The fresh state.
        """
        self.gateway.clear_state()
        self._state = self.engine.create_initial_state()
        self.notifications.clear()
        logger.info("Progress reset")
        return self._state


def open_session(config_path: str = "config/config.yaml") -> GameSession:
    """
    Load configuration, set up logging and open a loaded session.

    Args:
        config_path: Path to configuration file.

    Returns:
        Loaded session.

    Raises:
        ConfigurationError: If the configuration cannot be loaded.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "fitness_rpg_ledger")

    session = GameSession.from_config(param_loader.config)
    session.load()
    return session
