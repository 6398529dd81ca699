"""
Exercise registry.

Holds exercise metadata in registration order. Numbers are assigned on
registration (1-based) and never change.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .exercise import Exercise


def id_from_name(name: str) -> str:
    """Derive the slug used to index an exercise, e.g. "Hello World!" -> "hello_world"."""
    slug = re.sub(r"\s+", "_", name.strip().lower())
    return re.sub(r"[^\w]", "", slug)


@dataclass(frozen=True)
class ExerciseMeta:
    """Immutable registration record of one exercise."""

    id: str
    name: str
    number: int
    dir: Path | None
    factory: Callable[[], Exercise | Any]


class ExerciseRegistry:
    """Ordered, append-only collection of exercise metadata."""

    def __init__(self):
        self._ordered: list[ExerciseMeta] = []
        self._by_id: dict[str, ExerciseMeta] = {}

    def register(
        self,
        name: str,
        factory: Callable[[], Exercise | Any],
        dir: Path | str | None = None,
    ) -> ExerciseMeta:
        """
        Append an exercise.

        Args:
            name: Display name; its slug must be unique
            factory: Zero-argument callable building a fresh exercise instance
            dir: Directory holding the exercise's files

        Returns:
            The stored metadata, numbered by registration order
        """
        exercise_id = id_from_name(name)
        if exercise_id in self._by_id:
            raise ConfigurationError(f"Exercise {name!r} is already registered")

        meta = ExerciseMeta(
            id=exercise_id,
            name=name,
            number=len(self._ordered) + 1,
            dir=Path(dir) if dir is not None else None,
            factory=factory,
        )
        self._ordered.append(meta)
        self._by_id[exercise_id] = meta
        logger.info(f"Registered exercise #{meta.number}: {name}")
        return meta

    def resolve(self, name: str) -> ExerciseMeta | None:
        """Look up by name (or id); None when unknown."""
        return self._by_id.get(id_from_name(name))

    def list(self) -> list[str]:
        return [meta.name for meta in self._ordered]

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[ExerciseMeta]:
        return iter(self._ordered)
