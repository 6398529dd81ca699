"""
Message lookup for workshops.

Messages are flat dotted keys ("error.exercise.missing") mapped to strings,
or to ``{"one": ..., "other": ...}`` dicts for pluralized messages.
Placeholders use braces: ``"Exercise {count} of {amount}"``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from loguru import logger

PLACEHOLDER = re.compile(r"\{([\w.]+)\}")
FALLBACK_LANG = "en"


def flatten(messages: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested message dicts into dotted keys; plural dicts stay whole."""
    flat: dict[str, Any] = {}
    for key, value in messages.items():
        full = f"{prefix}{key}"
        if isinstance(value, Mapping) and not _is_plural(value):
            flat.update(flatten(value, f"{full}."))
        else:
            flat[full] = value
    return flat


def _is_plural(value: Mapping) -> bool:
    return bool(value) and set(value) <= {"zero", "one", "other"}


def bundled_messages(lang: str) -> dict[str, Any]:
    """Messages shipped with the package for ``lang`` (empty if none)."""
    resource = resources.files("adventure.i18n").joinpath("locales", f"{lang}.json")
    if not resource.is_file():
        return {}
    return flatten(json.loads(resource.read_text(encoding="utf-8")))


def file_messages(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    logger.debug(f"Loading messages from {path}")
    return flatten(json.loads(path.read_text(encoding="utf-8")))


class Translator:
    """Resolves message keys for one language."""

    def __init__(self, messages: Mapping[str, Any], lang: str = FALLBACK_LANG):
        self._messages = dict(messages)
        self._lang = lang

    def lang(self) -> str:
        return self._lang

    def has(self, key: str) -> bool:
        return key in self._messages

    def t(self, key: str, subs: Mapping[str, Any] | None = None, **kwargs) -> str:
        """Translate ``key``; unknown keys translate to themselves."""
        value = self._messages.get(key, key)
        if isinstance(value, Mapping):
            value = value.get("other", key)
        return self.interpolate(str(value), {**(subs or {}), **kwargs})

    def tn(self, key: str, count: int) -> str:
        """Translate a pluralized message, substituting ``{count}``."""
        value = self._messages.get(key, key)
        if isinstance(value, Mapping):
            if count == 0 and "zero" in value:
                value = value["zero"]
            elif count == 1 and "one" in value:
                value = value["one"]
            else:
                value = value.get("other", key)
        return self.interpolate(str(value), {"count": count})

    def interpolate(
        self,
        text: str,
        subs: Mapping[str, Any] | None = None,
        _seen: frozenset[str] = frozenset(),
    ) -> str:
        """Fill ``{placeholders}`` from ``subs``, then from own messages."""
        subs = subs or {}

        def replace(match: re.Match) -> str:
            name = match.group(1)
            if name in subs:
                return str(subs[name])
            value = self._messages.get(name)
            # a message may not expand itself
            if isinstance(value, str) and name not in _seen:
                return self.interpolate(value, subs, _seen | {name})
            return match.group(0)

        return PLACEHOLDER.sub(replace, text)

    def extend(self, overrides: Mapping[str, Any]) -> Translator:
        """A derived translator with extra or replaced messages."""
        return Translator({**self._messages, **overrides}, self._lang)

    def label(self, exercise_name: str) -> str:
        """Display name of an exercise."""
        key = f"exercise.{exercise_name}"
        return self.t(key) if self.has(key) else exercise_name


def build_messages(
    lang: str,
    overrides: Mapping[str, Any] | None = None,
    app_dir: Path | None = None,
) -> dict[str, Any]:
    """Bundled English, then bundled ``lang``, then app files, then overrides."""
    messages = bundled_messages(FALLBACK_LANG)
    if lang != FALLBACK_LANG:
        messages.update(bundled_messages(lang))
    if app_dir is not None:
        messages.update(file_messages(app_dir / "i18n" / f"{FALLBACK_LANG}.json"))
        if lang != FALLBACK_LANG:
            messages.update(file_messages(app_dir / "i18n" / f"{lang}.json"))
    if overrides:
        messages.update(flatten(overrides))
    return messages


def choose_language(
    languages: list[str],
    default_lang: str,
    app_store=None,
    global_store=None,
) -> str:
    """Stored app preference, then stored global preference, then the default."""
    for store in (app_store, global_store):
        if store is None:
            continue
        stored = store.get("lang")
        if stored in languages:
            return stored
    return default_lang
