"""
Exercise Loader: fresh exercise instances from registered factories.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from .registry import ExerciseRegistry


class ExerciseLoader:
    """Builds a new, initialized instance on every load; nothing is cached."""

    def __init__(self, registry: ExerciseRegistry, workshop: Any = None):
        self.registry = registry
        self.workshop = workshop

    def load(self, name: str) -> Any | None:
        """
        Instantiate the exercise registered under ``name``.

        Returns:
            The exercise with ``meta`` attached, or None if not registered
        """
        meta = self.registry.resolve(name)
        if meta is None:
            logger.debug(f"No exercise registered as {name!r}")
            return None

        exercise = meta.factory()
        init = getattr(exercise, "init", None)
        if callable(init):
            init(self.workshop, meta.id, meta.name, meta.dir, meta.number)
        exercise.meta = meta
        return exercise
