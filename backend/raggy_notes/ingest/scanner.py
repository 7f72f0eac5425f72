"""Note source scanning."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from raggy_notes.core.errors import NoteSourceError
from raggy_notes.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_EXTENSIONS = (".md",)


def scan_notes(root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[Path]:
    """Return every note file below ``root`` in traversal order.

    Recurses into subdirectories without a depth limit. Any directory that
    cannot be listed aborts the scan with ``NoteSourceError``; no partial
    result is returned.
    """
    suffixes = {ext.lower() for ext in extensions}
    root = root.expanduser()
    logger.info("Scanning directory: %s", root)
    found: list[Path] = []
    try:
        _walk(root, suffixes, found)
    except OSError as exc:
        raise NoteSourceError(f"Cannot scan {exc.filename or root}: {exc.strerror or exc}") from exc
    return found


def _walk(directory: Path, suffixes: set[str], found: list[Path]) -> None:
    for entry in directory.iterdir():
        if entry.is_dir():
            _walk(entry, suffixes, found)
        elif entry.suffix.lower() in suffixes:
            logger.debug("Found note file: %s", entry)
            found.append(entry)


__all__ = ["scan_notes", "DEFAULT_EXTENSIONS"]
