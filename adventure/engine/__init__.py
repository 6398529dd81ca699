"""
Exercise lifecycle engine.

Components:
- ExerciseRegistry: ordered exercise metadata
- ExerciseLoader: fresh exercise instances from factories
- ContentComposer: ordered content with first-match fallbacks
- ProgressStore: completed exercises and the current pointer
- KeyValueStore: SQLite persistence
- Workshop: show and run paths, outcomes
"""

from .content import ContentBlock, ContentComposer, FileList, FileRef
from .errors import AdventureError, ConfigurationError, ConsoleErrorReporter
from .exercise import Exercise, ModeKind, ModeSpec, ValidationChannel, callback_mode, sync_mode
from .loader import ExerciseLoader
from .outcome import EXIT_FAILURE, EXIT_SUCCESS, LifecycleState, Outcome
from .progress import ProgressStore
from .registry import ExerciseMeta, ExerciseRegistry, id_from_name
from .storage import KeyValueStore
from .workshop import Workshop, WorkshopOptions

__all__ = [
    # Registration
    "ExerciseRegistry",
    "ExerciseMeta",
    "ExerciseLoader",
    "id_from_name",
    # Exercises
    "Exercise",
    "ModeKind",
    "ModeSpec",
    "ValidationChannel",
    "sync_mode",
    "callback_mode",
    # Content
    "ContentComposer",
    "ContentBlock",
    "FileRef",
    "FileList",
    # Persistence
    "KeyValueStore",
    "ProgressStore",
    # Lifecycle
    "Workshop",
    "WorkshopOptions",
    "Outcome",
    "LifecycleState",
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    # Errors
    "AdventureError",
    "ConfigurationError",
    "ConsoleErrorReporter",
]
