"""
Exercise discovery from an exercise directory.

Layout:
    exercises/
        menu.json            # ["Hello World", "Baby Steps", ...]
        hello_world/
            exercise.py      # defines create_exercise()
        baby_steps/
            exercise.py
"""

from __future__ import annotations

import importlib.util
import json
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .errors import ConfigurationError
from .registry import id_from_name

if TYPE_CHECKING:
    from .workshop import Workshop

MENU_FILE = "menu.json"
EXERCISE_MODULE = "exercise.py"
FACTORY_NAME = "create_exercise"


def read_menu(exercise_dir: Path) -> list[str]:
    """Ordered exercise names from ``menu.json``."""
    menu_path = exercise_dir / MENU_FILE
    try:
        names = json.loads(menu_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"No {MENU_FILE} in {exercise_dir}") from None
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ConfigurationError(f"{menu_path} must be a JSON list of exercise names")
    return names


def module_factory(module_path: Path, module_name: str):
    """A factory that imports ``module_path`` and calls its ``create_exercise()``."""

    def factory() -> Any:
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot import exercise module {module_path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        create = getattr(module, FACTORY_NAME, None)
        if create is None:
            raise ConfigurationError(f"{module_path} does not define {FACTORY_NAME}()")
        return create()

    return factory


def load_catalogue(
    workshop: Workshop,
    exercise_dir: Path | str | None = None,
    names: Iterable[str] | None = None,
) -> int:
    """
    Register every exercise listed for ``exercise_dir``.

    Args:
        workshop: Workshop to register into
        exercise_dir: Defaults to the workshop's exercise directory
        names: Explicit order; read from menu.json when omitted

    Returns:
        Number of exercises registered
    """
    base = Path(exercise_dir or workshop.options.exercise_dir or "")
    if not base.is_dir():
        raise ConfigurationError(f"Exercise directory not found: {base}")

    names = list(names) if names is not None else read_menu(base)
    for name in names:
        exercise_id = id_from_name(name)
        directory = base / exercise_id
        module_path = directory / EXERCISE_MODULE
        if not module_path.is_file():
            raise ConfigurationError(f"Exercise {name!r} has no {module_path}")
        workshop.add_exercise(
            name,
            module_factory(module_path, f"adventure_exercise_{exercise_id}"),
            directory,
        )

    logger.info(f"Loaded {len(names)} exercises from {base}")
    return len(names)
