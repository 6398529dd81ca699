"""
Adventure: terminal workshop runner for self-checking exercises.

A workshop registers exercises, shows their instructions, runs their
modes (``run`` to try, ``verify`` to check) and remembers which ones the
user has completed.

Packages:
- engine: registry, loader, content composition, lifecycle, progress
- i18n: message lookup and bundled locales
- menu: exercise menu composition and Rich rendering
- cli: typer commands bound to a workshop
"""

from .engine import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    ConfigurationError,
    Exercise,
    LifecycleState,
    Outcome,
    ValidationChannel,
    Workshop,
    WorkshopOptions,
    callback_mode,
    sync_mode,
)
from .menu import Command

__version__ = "1.0.0"

__all__ = [
    "Workshop",
    "WorkshopOptions",
    "Exercise",
    "ValidationChannel",
    "sync_mode",
    "callback_mode",
    "Command",
    "Outcome",
    "LifecycleState",
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "ConfigurationError",
]
