"""
Hashing and record ID generation utilities.

Provides deterministic workout set ID generation from the set's identity fields.
"""

import hashlib

from fitness_rpg_ledger.utils.parameters import SetIDConfig


def set_identity_string(date: str, exercise: str, weight: float, reps: int) -> str:
    """
    Build the canonical string form of a set's identity tuple.

    Args:
        date: ISO calendar date.
        exercise: Exercise name.
        weight: Weight lifted.
        reps: Repetitions.

    Returns:
        Pipe-separated identity string.
    """
    return "|".join([date, exercise, f"{weight:.3f}", str(reps)])


def generate_set_id(
    date: str,
    exercise: str,
    weight: float,
    reps: int,
    config: SetIDConfig,
) -> str:
    """
    Generate deterministic set ID from the (date, exercise, weight, reps) tuple.

    Two sets with the same identity tuple always receive the same ID, which is
    safe because the canonical set collection never holds duplicate facts.

    Args:
        date: ISO calendar date.
        exercise: Exercise name.
        weight: Weight lifted.
        reps: Repetitions.
        config: Set ID generation configuration.

    Returns:
        Hex digest truncated to the configured length.
    """
    hash_func = hashlib.new(config.algorithm)
    hash_func.update(set_identity_string(date, exercise, weight, reps).encode("utf-8"))

    return hash_func.hexdigest()[: config.length]
