"""
Progress tracking on top of a key-value store.

Keys used:
- ``completed``: list of exercise names, in completion order
- ``current``: name of the most recently shown exercise
"""

from __future__ import annotations

from typing import Protocol

from loguru import logger

COMPLETED_KEY = "completed"
CURRENT_KEY = "current"


class ValueStore(Protocol):
    """The storage surface the progress store needs."""

    def get(self, key: str): ...

    def save(self, key: str, value) -> None: ...


class ProgressStore:
    """Completed exercises and the current pointer for one workshop."""

    def __init__(self, store: ValueStore, total_registered):
        """
        Args:
            store: Durable get/save storage
            total_registered: Callable returning how many exercises are registered
        """
        self.store = store
        self._total_registered = total_registered

    @property
    def completed(self) -> list[str]:
        return list(self.store.get(COMPLETED_KEY) or [])

    @property
    def current(self) -> str | None:
        return self.store.get(CURRENT_KEY)

    def is_completed(self, name: str) -> bool:
        return name in self.completed

    def completed_count(self) -> int:
        return len(self.completed)

    def remaining(self) -> int:
        """
        Exercises still to complete.

        Not clamped: names completed under an older catalogue still count,
        so this can go below zero if the catalogue shrank.
        """
        return self._total_registered() - self.completed_count()

    def mark_completed(self, name: str) -> None:
        """Add ``name`` to the completed list; always writes the list back."""
        completed = self.completed
        if name not in completed:
            completed.append(name)
            logger.debug(f"Marked {name!r} completed ({len(completed)} total)")
        self.store.save(COMPLETED_KEY, completed)

    def set_current(self, name: str) -> None:
        self.store.save(CURRENT_KEY, name)

    def reset(self) -> None:
        """Forget all progress."""
        self.store.save(COMPLETED_KEY, [])
        self.store.save(CURRENT_KEY, None)
        logger.info("Progress reset")
