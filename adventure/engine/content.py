"""
Content Composer: ordered, renderable documents built from fallbacks.

Callers chain alternatives with ``or``; the first one that actually
queues something wins:

    composer.append(exercise.header, exercise.header_type) \\
        or composer.append(FileRef(exercise.header_file)) \\
        or composer.append(options.header, options.header_type)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console
from rich.errors import MarkupError
from rich.markdown import Markdown
from rich.markup import escape
from rich.text import Text

from ..i18n import Translator
from ..i18n.translator import PLACEHOLDER

MARKDOWN_SUFFIXES = {".md", ".markdown"}


@dataclass(frozen=True)
class FileRef:
    """Content stored in a file; ``{lang}`` in the path is the active language."""

    path: str | Path | None


@dataclass(frozen=True)
class FileList:
    """A list of file paths, shown one per line."""

    files: list[str | Path] = field(default_factory=list)


@dataclass(frozen=True)
class ContentBlock:
    """One queued piece of the document."""

    source: Any
    type_tag: str | None = None
    file_path: Path | None = None


class ContentComposer:
    """Queues content blocks and writes them to a console in order."""

    def __init__(self, translator: Translator):
        self.translator = translator
        self.blocks: list[ContentBlock] = []

    def append(self, content: Any, type_tag: str | None = None) -> bool:
        """
        Queue ``content`` if it is present.

        Args:
            content: Text, a FileRef, or a FileList
            type_tag: "md" (Markdown) or "txt" (literal text); "markup" is
                reserved for the engine's own Rich-markup templates

        Returns:
            True if something was queued, False if the caller should try
            the next alternative
        """
        if isinstance(content, FileRef):
            return self._append_file(content)
        if isinstance(content, FileList):
            if not content.files:
                return False
            self.blocks.append(ContentBlock(source=[str(f) for f in content.files], type_tag="files"))
            return True
        if content is None or content == "":
            return False
        self.blocks.append(ContentBlock(source=content, type_tag=type_tag or "txt"))
        return True

    def append_plus(self, content: Any, type_tag: str | None = None) -> bool:
        """Like append, but also takes Paths and ready-made Rich renderables."""
        if isinstance(content, Path):
            return self._append_file(FileRef(content))
        if isinstance(content, (str, FileRef, FileList)) or content is None:
            return self.append(content, type_tag)
        self.blocks.append(ContentBlock(source=content, type_tag="renderable"))
        return True

    def _append_file(self, ref: FileRef) -> bool:
        if not ref.path:
            return False
        path = Path(str(ref.path).replace("{lang}", self.translator.lang()))
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read content file {path}: {e}")
            return False
        if not text:
            return False
        type_tag = "md" if path.suffix.lower() in MARKDOWN_SUFFIXES else "txt"
        self.blocks.append(ContentBlock(source=text, type_tag=type_tag, file_path=path))
        return True

    def renderables(self) -> list[Any]:
        """Rich renderables for the queued blocks, in queue order."""
        out = []
        for block in self.blocks:
            if block.type_tag == "renderable":
                out.append(block.source)
            elif block.type_tag == "files":
                listing = Text()
                for path in block.source:
                    listing.append(f"  {path}\n", style="cyan")
                out.append(listing)
            elif block.type_tag == "md":
                out.append(Markdown(self.translator.interpolate(block.source)))
            elif block.type_tag == "markup":
                out.append(self._markup(str(block.source)))
            else:
                out.append(Text(self.translator.interpolate(str(block.source))))
        return out

    def _markup(self, template: str) -> Text:
        """Rich markup template; substituted values are escaped."""

        def replace(match: re.Match) -> str:
            return escape(self.translator.interpolate(match.group(0)))

        markup = PLACEHOLDER.sub(replace, template)
        try:
            return Text.from_markup(markup)
        except MarkupError:
            return Text(markup)

    def render(self, console: Console) -> None:
        """Write every block; returns once all output is written."""
        for renderable in self.renderables():
            console.print(renderable)
