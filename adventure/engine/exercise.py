"""
Base class and mode declarations for exercises.

Every optional hook has a no-op default here, so the engine can call
hooks unconditionally. Modes are declared with one of two decorators:

- ``@sync_mode("run")``: ``fn(self, args, channel)`` returns content to
  display (or None) and never reports pass/fail.
- ``@callback_mode("verify")``: ``fn(self, args, channel, done)`` reports
  its result through ``done(err, passed)``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .registry import ExerciseMeta


class ModeKind(str, Enum):
    SYNC = "sync"
    CALLBACK = "callback"


@dataclass(frozen=True)
class ModeSpec:
    """A declared mode: the attribute implementing it and its calling style."""

    name: str
    attr: str
    kind: ModeKind


_MODE_TAG = "_adventure_mode"


def _mode_decorator(kind: ModeKind, name: str | None):
    def decorator(fn):
        setattr(fn, _MODE_TAG, (name or fn.__name__, kind))
        return fn

    return decorator


def sync_mode(name: str | None = None):
    """Declare a mode that returns content directly."""
    return _mode_decorator(ModeKind.SYNC, name)


def callback_mode(name: str | None = None):
    """Declare a mode that reports through ``done(err, passed)``."""
    return _mode_decorator(ModeKind.CALLBACK, name)


class ValidationChannel:
    """Live pass/fail messages from a running mode to the engine."""

    def __init__(
        self,
        on_pass: Callable[[str], None] | None = None,
        on_fail: Callable[[str], None] | None = None,
    ):
        self._on_pass = on_pass
        self._on_fail = on_fail

    def passed(self, message: str) -> None:
        if self._on_pass:
            self._on_pass(message)

    def failed(self, message: str) -> None:
        if self._on_fail:
            self._on_fail(message)


class Exercise:
    """
    Capability base for exercises.

    Subclasses set content fields and override the hooks they need.
    Callbacks follow ``callback(err, *results)``; ``err`` is None on success.
    """

    # Content slots
    header: str | None = None
    header_type: str | None = None
    header_file: str | Path | None = None
    problem: str | None = None
    problem_type: str | None = None
    problem_file: str | Path | None = None
    footer: str | None = None
    footer_type: str | None = None
    footer_file: str | Path | None = None

    # Outcome screens
    pass_text: str | None = None
    pass_type: str | None = None
    fail_text: str | None = None
    fail_type: str | None = None
    solution: str | None = None
    solution_type: str | None = None
    hide_solutions: bool = False

    _modes: dict[str, ModeSpec] = {}

    meta: ExerciseMeta | None = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        modes = {}
        for base in reversed(cls.__mro__[1:]):
            modes.update(getattr(base, "_modes", {}))
        for attr, value in vars(cls).items():
            tag = getattr(value, _MODE_TAG, None)
            if tag is not None:
                mode_name, kind = tag
                modes[mode_name] = ModeSpec(name=mode_name, attr=attr, kind=kind)
        cls._modes = modes

    # -- identity ---------------------------------------------------------

    def init(self, workshop, id: str, name: str, dir: Path | None, number: int) -> None:
        """Called once, right after construction."""
        self.workshop = workshop
        self.id = id
        self.name = name
        self.dir = dir
        self.number = number

    # -- optional hooks ---------------------------------------------------

    def prepare(self, callback: Callable[..., None]) -> None:
        callback(None)

    def get_exercise_text(self, callback: Callable[..., None]) -> None:
        """Generate instructional text: ``callback(err, type_tag, text)``."""
        callback(None, None, None)

    def get_solution_files(self, callback: Callable[..., None]) -> None:
        """Reference solution paths: ``callback(err, files)``."""
        callback(None, [])

    def end(self, mode: str, passed: bool, callback: Callable[..., None]) -> None:
        """Cleanup after any run, whatever its result."""
        callback(None)

    # -- modes ------------------------------------------------------------

    @classmethod
    def modes(cls) -> dict[str, ModeSpec]:
        return dict(cls._modes)

    def mode(self, name: str) -> tuple[ModeSpec, Any] | None:
        """The declared mode and its current attribute value, or None."""
        spec = self._modes.get(name)
        if spec is None:
            return None
        return spec, getattr(self, spec.attr, None)
