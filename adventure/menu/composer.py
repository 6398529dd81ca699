"""
Menu Composer: the exercise list plus auxiliary commands.

Composition only reads the registry and the progress store; selecting an
entry is what triggers side effects.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from rich.markup import escape

if TYPE_CHECKING:
    from ..engine.workshop import Workshop


@dataclass(frozen=True)
class MenuEntry:
    """One exercise row."""

    label: str
    marker: str
    handler: Callable[[], None]


@dataclass(frozen=True)
class MenuExtra:
    """One auxiliary command row below the exercises."""

    label: str
    handler: Callable[[], None]


@dataclass(frozen=True)
class MenuSpec:
    title: str
    subtitle: str | None
    menu: list[MenuEntry] = field(default_factory=list)
    extras: list[MenuExtra] = field(default_factory=list)
    prompt: str | None = None


class MenuComposer:
    """Builds a MenuSpec for a workshop."""

    def __init__(self, workshop: Workshop):
        self.workshop = workshop

    def _in_menu(self, command) -> bool:
        if command.filter is not None and not command.filter(self.workshop):
            return False
        return command.menu is not False

    def entries(self) -> list[MenuEntry]:
        workshop = self.workshop
        completed = set(workshop.progress.completed)
        completed_marker = f"[{workshop.t('menu.completed')}]"
        return [
            MenuEntry(
                label=f"[bold]»[/bold] {escape(workshop.translator.label(name))}",
                marker=escape(completed_marker) if name in completed else "",
                handler=partial(workshop.print_exercise, name),
            )
            for name in workshop.exercises
        ]

    def extras(self) -> list[MenuExtra]:
        workshop = self.workshop
        extras = [
            MenuExtra(
                label=workshop.t(f"menu.{command.name}"),
                handler=partial(command.handler, workshop),
            )
            for command in reversed(workshop.commands)
            if self._in_menu(command)
        ]
        extras.append(
            MenuExtra(
                label=workshop.t("menu.exit"),
                handler=workshop.exit,
            )
        )
        return extras

    def compose(self) -> MenuSpec:
        workshop = self.workshop
        translator = workshop.translator
        return MenuSpec(
            title=translator.t("title"),
            subtitle=translator.t("subtitle") if translator.has("subtitle") else None,
            menu=self.entries(),
            extras=self.extras(),
            prompt=translator.t("menu.prompt"),
        )
