"""
Fitness RPG Ledger - Training, sleep and nutrition tracking with RPG progression.

Imports workout sets and daily lifestyle logs, deduplicates and merges them,
and derives character experience, levels, quests and achievements.
"""

__version__ = "0.1.0"
