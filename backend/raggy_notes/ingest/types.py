"""Note data structures shared by ingestion and retrieval."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from raggy_notes.core.errors import EmbeddingDimensionError
from raggy_notes.utils.ids import new_id
from raggy_notes.utils.time import parse_utc, utc_now

DEFAULT_TITLE = "Untitled"
DEFAULT_CONTENT = "No content"
DEFAULT_PATH = "Unknown path"


@dataclass(slots=True)
class LoadedNote:
    """A note file read from disk."""

    path: Path
    title: str
    content: str


@dataclass(slots=True)
class NotePayload:
    """Metadata stored next to every note vector."""

    title: str
    content: str
    file_path: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "file_path": self.file_path,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any] | None) -> "NotePayload":
        """Decode a store payload, substituting defaults for missing or mistyped fields."""
        record = record or {}
        return cls(
            title=_str_or(record.get("title"), DEFAULT_TITLE),
            content=_str_or(record.get("content"), DEFAULT_CONTENT),
            file_path=_str_or(record.get("file_path"), DEFAULT_PATH),
            created_at=parse_utc(record.get("created_at")),
            updated_at=parse_utc(record.get("updated_at")),
        )


@dataclass(slots=True)
class NoteVector:
    """One note with its embedding vectors, ready to upsert."""

    embeddings: list[list[float]]
    payload: NotePayload
    id: str = field(default_factory=new_id)

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        file_path: Path | str,
        embeddings: Sequence[Sequence[float]],
        dim: int,
    ) -> "NoteVector":
        now = utc_now()
        note = cls(
            embeddings=[list(vector) for vector in embeddings],
            payload=NotePayload(
                title=title or DEFAULT_TITLE,
                content=content,
                file_path=str(file_path),
                created_at=now,
                updated_at=now,
            ),
        )
        note.validate(dim)
        return note

    def validate(self, dim: int) -> None:
        if not self.embeddings:
            raise EmbeddingDimensionError(dim, 0)
        for vector in self.embeddings:
            if len(vector) != dim:
                raise EmbeddingDimensionError(dim, len(vector))


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


__all__ = [
    "DEFAULT_TITLE",
    "DEFAULT_CONTENT",
    "DEFAULT_PATH",
    "LoadedNote",
    "NotePayload",
    "NoteVector",
]
