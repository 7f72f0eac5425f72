"""Search results shown to the user."""

from __future__ import annotations

from dataclasses import dataclass

from raggy_notes.retrieval.vector_store import ScoredNote
from raggy_notes.utils.text import truncate

PREVIEW_CHARS = 100


@dataclass(frozen=True, slots=True)
class SearchResult:
    id: str
    title: str
    content: str
    content_preview: str
    score: float
    file_path: str

    @classmethod
    def from_scored(cls, hit: ScoredNote) -> "SearchResult":
        return cls(
            id=hit.id,
            title=hit.payload.title,
            content=hit.payload.content,
            content_preview=truncate(hit.payload.content, PREVIEW_CHARS),
            score=hit.score,
            file_path=hit.payload.file_path,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "score": round(self.score, 4),
            "file_path": self.file_path,
            "preview": self.content_preview,
        }


__all__ = ["SearchResult", "PREVIEW_CHARS"]
