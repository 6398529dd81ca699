"""
Interactive exercise menu.
"""

from .commands import Command, builtin_commands
from .composer import MenuComposer, MenuEntry, MenuExtra, MenuSpec
from .renderer import RichMenuRenderer

__all__ = [
    "Command",
    "builtin_commands",
    "MenuComposer",
    "MenuEntry",
    "MenuExtra",
    "MenuSpec",
    "RichMenuRenderer",
]
