"""
Local snapshot store.

Keeps the whole game state in one JSON file that is loaded on startup and
rewritten after every change.
"""

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from fitness_rpg_ledger.domain.progression import GameState
from fitness_rpg_ledger.utils.exceptions import StateStoreError
from fitness_rpg_ledger.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)


class StateStore:
    """JSON file store for the game state snapshot."""

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize state store.

        Args:
            config: Storage configuration.
        """
        self.state_file = Path(config.state_file)

    def load(self) -> GameState | None:
        """
        Load the saved snapshot.

        Returns:
            The saved state, or None when there is no usable snapshot. An
            unreadable snapshot is logged and treated as absent.
        """
        if not self.state_file.exists():
            logger.info(f"No saved state at {self.state_file}")
            return None

        try:
            state = GameState.from_json(self.state_file.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable state snapshot {self.state_file}: {e}")
            return None

        logger.info(
            f"Loaded state: {len(state.sets)} sets, {len(state.daily_logs)} daily logs"
        )
        return state

    def save(self, state: GameState) -> None:
        """
        Write the snapshot, replacing the previous one atomically.

        Args:
            state: State to persist.

        Raises:
            StateStoreError: If the snapshot cannot be written.
        """
        tmp_file = self.state_file.with_name(self.state_file.name + ".tmp")

        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_file.write_text(state.to_json(), encoding="utf-8")
            os.replace(tmp_file, self.state_file)
        except OSError as e:
            raise StateStoreError(f"Failed to save state to {self.state_file}: {e}") from e

        logger.debug(f"Saved state to {self.state_file}")

    def clear(self) -> None:
        """Delete the snapshot if present."""
        try:
            self.state_file.unlink(missing_ok=True)
        except OSError as e:
            raise StateStoreError(f"Failed to delete state {self.state_file}: {e}") from e
