"""Sibling-file lookup that lets display prose live next to display.yaml."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from method_catalog.parser.tree import as_text, display_prop

logger = logging.getLogger(__name__)


class FileLookup(Protocol):
    def load_file_content(self, name: str) -> str | None: ...


class DirectoryLookup:
    """Reads files relative to one entity's source directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    def load_file_content(self, name: str) -> str | None:
        path = self.directory / name
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Ignoring unreadable file %s: %s", path, exc)
            return None


class EmptyLookup:
    def load_file_content(self, name: str) -> str | None:
        return None


class CallableLookup:
    """Adapts a ``name -> text | None`` function, e.g. a repo provider method."""

    def __init__(self, load: Callable[[str], str | None]):
        self._load = load

    def load_file_content(self, name: str) -> str | None:
        return self._load(name)


def resolve_display_prop(display: dict, prop: str, lookup: FileLookup, required: bool = True) -> str | None:
    """Prefer ``{prop}.html`` beside the entity, then the display map entry."""
    text = lookup.load_file_content(f"{prop}.html")
    if text is not None:
        return text
    if not required and display.get(prop) is None:
        return None
    return as_text(display_prop(display, prop), prop)
