"""Note file loading."""

from __future__ import annotations

from pathlib import Path

import yaml

from raggy_notes.core.errors import NoteSourceError
from raggy_notes.ingest.types import DEFAULT_TITLE, LoadedNote


def load_note(path: Path) -> LoadedNote:
    """Read a note and derive its title.

    The title comes from a ``title`` key in YAML front matter when present,
    otherwise from the filename stem. The content is the full file text.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise NoteSourceError(f"Cannot read {path}: {exc}") from exc
    front_matter = _front_matter(content)
    title = front_matter.get("title") if front_matter else None
    if not isinstance(title, str) or not title.strip():
        title = path.stem or DEFAULT_TITLE
    return LoadedNote(path=path, title=title.strip(), content=content)


def _front_matter(text: str) -> dict[str, object] | None:
    if text.startswith("---"):
        parts = text.split("---", 2)
        if len(parts) >= 3:
            try:
                front_matter = yaml.safe_load(parts[1]) or {}
            except yaml.YAMLError:
                return None
            if isinstance(front_matter, dict):
                return front_matter
    return None


__all__ = ["load_note"]
