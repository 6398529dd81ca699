"""
Localization for workshop messages.
"""

from .translator import Translator, build_messages, choose_language, flatten

__all__ = [
    "Translator",
    "build_messages",
    "choose_language",
    "flatten",
]
