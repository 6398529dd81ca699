"""
Command-line surface for a workshop.

Commands:
- <app>                 - Show the exercise menu
- <app> list            - List exercises with completion markers
- <app> current         - Name of the current exercise
- <app> print [name]    - Show an exercise (default: the current one)
- <app> select <name>   - Make an exercise current and show it
- <app> next            - Show the next incomplete exercise
- <app> run [args]      - Try out the current exercise
- <app> verify [args]   - Check the current exercise
- <app> reset           - Forget all progress
- <app> language <lang> - Choose the display language
"""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

import typer
from loguru import logger
from rich.markup import escape

from config import get_settings

from ..engine.errors import ConfigurationError

if TYPE_CHECKING:
    from ..engine.workshop import Workshop


def configure_logging(level: str | None = None) -> None:
    """Route loguru to stderr at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or get_settings().log_level,
        format="<level>{message}</level>",
    )


def _exit_with_outcome(workshop: Workshop) -> None:
    outcome = workshop.outcome
    if outcome is not None and not outcome.ok:
        raise typer.Exit(outcome.exit_code)


def build_app(workshop: Workshop) -> typer.Typer:
    """A typer app whose commands drive ``workshop``."""
    app = typer.Typer(
        name=workshop.name,
        help=workshop.t("title"),
        invoke_without_command=True,
        add_completion=False,
    )
    console = workshop.console

    @app.callback()
    def root(ctx: typer.Context) -> None:
        configure_logging()
        workshop.outcome = None
        if ctx.invoked_subcommand is None:
            workshop.print_menu()
            _exit_with_outcome(workshop)

    @app.command()
    def menu() -> None:
        """Show the exercise menu."""
        workshop.print_menu()
        _exit_with_outcome(workshop)

    @app.command("list")
    def list_exercises() -> None:
        """List exercises in order."""
        completed = set(workshop.progress.completed)
        marker = workshop.t("menu.completed")
        for name in workshop.exercises:
            label = escape(workshop.translator.label(name))
            if name in completed:
                console.print(f"{label} [green]{escape(f'[{marker}]')}[/green]")
            else:
                console.print(label)

    @app.command()
    def current() -> None:
        """Print the name of the current exercise."""
        name = workshop.progress.current
        if not name:
            workshop.error_reporter(workshop.t("error.exercise.none_active"))
            raise typer.Exit(1)
        console.print(escape(name))

    @app.command("print")
    def print_(name: Optional[str] = typer.Argument(None, help="Exercise name")) -> None:
        """Show an exercise's instructions."""
        target = name or workshop.progress.current
        if not target:
            workshop.error_reporter(workshop.t("error.exercise.none_active"))
            raise typer.Exit(1)
        workshop.print_exercise(target)
        _exit_with_outcome(workshop)

    @app.command()
    def select(name: str = typer.Argument(..., help="Exercise name")) -> None:
        """Make an exercise current and show it."""
        workshop.print_exercise(name)
        _exit_with_outcome(workshop)

    @app.command("next")
    def next_() -> None:
        """Show the next incomplete exercise."""
        name = workshop.next_exercise()
        if name is None:
            console.print(escape(workshop.t("progress.none_remaining")))
            return
        workshop.print_exercise(name)
        _exit_with_outcome(workshop)

    @app.command()
    def run(args: Optional[list[str]] = typer.Argument(None, help="Arguments for the exercise")) -> None:
        """Try out the current exercise without checking it."""
        workshop.run_current("run", args or [])
        _exit_with_outcome(workshop)

    @app.command()
    def verify(args: Optional[list[str]] = typer.Argument(None, help="Arguments for the exercise")) -> None:
        """Check the current exercise."""
        workshop.run_current("verify", args or [])
        _exit_with_outcome(workshop)

    @app.command()
    def reset() -> None:
        """Forget all completed exercises."""
        workshop.reset_progress()
        console.print(f"[green]{escape(workshop.t('reset.done'))}[/green]")

    @app.command()
    def language(lang: str = typer.Argument(..., help="Language code, e.g. en")) -> None:
        """Choose the display language."""
        try:
            workshop.select_language(lang)
        except ConfigurationError as e:
            workshop.error_reporter(str(e))
            raise typer.Exit(1)
        console.print(escape(workshop.t("language.selected", lang=lang)))

    return app
