"""
Auxiliary menu commands.

Each command has a handler taking the workshop, an optional visibility
filter, and a ``menu`` flag to keep it off the menu entirely.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.prompt import Prompt

if TYPE_CHECKING:
    from ..engine.workshop import Workshop


@dataclass(frozen=True)
class Command:
    """A named action shown below the exercise list."""

    name: str
    handler: Callable[[Workshop], None]
    menu: bool = True
    filter: Callable[[Workshop], bool] | None = None
    help: str = ""


def show_help(workshop: Workshop) -> None:
    workshop.console.print(escape(workshop.t("help.usage")))


def choose_language(workshop: Workshop) -> None:
    lang = Prompt.ask(
        workshop.t("language.prompt"),
        choices=workshop.options.languages,
        default=workshop.translator.lang(),
        console=workshop.console,
    )
    workshop.select_language(lang)
    workshop.console.print(workshop.t("language.selected", lang=lang))
    workshop.print_menu()


def reset_progress(workshop: Workshop) -> None:
    workshop.reset_progress()
    workshop.console.print(f"[green]{escape(workshop.t('reset.done'))}[/green]")
    workshop.print_menu()


def builtin_commands() -> list[Command]:
    """Commands every workshop gets, in registration order."""
    return [
        Command("help", show_help, help="Show how to work through the exercises"),
        Command(
            "language",
            choose_language,
            filter=lambda workshop: len(workshop.options.languages) > 1,
            help="Choose the display language",
        ),
        Command(
            "reset",
            reset_progress,
            filter=lambda workshop: workshop.progress.completed_count() > 0,
            help="Forget completed exercises",
        ),
    ]
