"""
Terminal outcomes of a workshop invocation.

The engine never exits the process itself; it hands an Outcome to the
hosting layer, which picks the exit code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class LifecycleState(str, Enum):
    """States an exercise run can end in."""

    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"
    RUN_COMPLETE = "run_complete"
    EXITED = "exited"


@dataclass(frozen=True)
class Outcome:
    """Where an invocation ended and which exit code it implies."""

    state: LifecycleState
    exit_code: int
    mode: str | None = None
    exercise: Any = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_SUCCESS

    @classmethod
    def from_pass(cls, mode: str, passed: bool, exercise: Any = None) -> Outcome:
        if mode == "run" and passed:
            state = LifecycleState.RUN_COMPLETE
        else:
            state = LifecycleState.PASSED if passed else LifecycleState.FAILED
        return cls(
            state=state,
            exit_code=EXIT_SUCCESS if passed else EXIT_FAILURE,
            mode=mode,
            exercise=exercise,
        )

    @classmethod
    def errored(cls, message: str, mode: str | None = None, exercise: Any = None) -> Outcome:
        return cls(
            state=LifecycleState.ERRORED,
            exit_code=EXIT_FAILURE,
            mode=mode,
            exercise=exercise,
            message=message,
        )

    @classmethod
    def exited(cls) -> Outcome:
        return cls(state=LifecycleState.EXITED, exit_code=EXIT_SUCCESS)
