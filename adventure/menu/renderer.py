"""
Rich terminal menu renderer.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt
from rich.table import Table
from rich.text import Text

from .composer import MenuSpec

MENU_STYLES = {
    "title": "bold cyan",
    "subtitle": "dim",
    "number": "cyan",
    "marker": "bold green",
    "extra": "dim",
}


class RichMenuRenderer:
    """Draws a MenuSpec as a numbered table and dispatches the chosen entry."""

    def __init__(self, console: Console | None = None, width: int = 65):
        self.console = console or Console()
        self.width = width

    def render(self, spec: MenuSpec) -> Panel:
        table = Table(show_header=False, box=None, expand=True, padding=(0, 1))
        table.add_column("#", style=MENU_STYLES["number"], justify="right", width=3)
        table.add_column("Entry", ratio=1)
        table.add_column("Marker", style=MENU_STYLES["marker"], justify="right")

        number = 0
        for entry in spec.menu:
            number += 1
            table.add_row(str(number), entry.label, entry.marker)
        if spec.extras:
            table.add_row("", "", "")
        for extra in spec.extras:
            number += 1
            table.add_row(str(number), Text(extra.label, style=MENU_STYLES["extra"]), "")

        return Panel(
            table,
            title=Text(spec.title, style=MENU_STYLES["title"]),
            subtitle=Text(spec.subtitle, style=MENU_STYLES["subtitle"]) if spec.subtitle else None,
            border_style="cyan",
            box=box.ROUNDED,
            width=self.width,
            padding=(1, 2),
        )

    def create(self, spec: MenuSpec) -> None:
        """Show the menu, ask for a number, run the chosen handler."""
        self.console.print(self.render(spec))
        handlers = [entry.handler for entry in spec.menu] + [extra.handler for extra in spec.extras]
        if not handlers:
            return
        choice = IntPrompt.ask(
            spec.prompt or "Choose an entry",
            choices=[str(i) for i in range(1, len(handlers) + 1)],
            show_choices=False,
            console=self.console,
        )
        handlers[choice - 1]()
