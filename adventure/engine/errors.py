"""
Error types and the user-facing error reporter.
"""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from rich.console import Console
from rich.markup import escape


class AdventureError(Exception):
    """Base class for workshop errors."""


class ConfigurationError(AdventureError):
    """The workshop was constructed or populated with invalid settings."""


class ErrorReporter(Protocol):
    def __call__(self, message: str) -> None: ...


class ConsoleErrorReporter:
    """Prints localized error messages in bold red."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def __call__(self, message: str) -> None:
        logger.error(message)
        self.console.print(f"[bold red]{escape(message)}[/bold red]")


def error_text(err) -> str:
    """Message of an exception, or the value itself for plain error values."""
    if isinstance(err, BaseException):
        return str(err) or type(err).__name__
    return str(err)
