"""Test fixtures for Raggy Notes."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from raggy_notes.core.errors import InferenceError, VectorStoreError  # noqa: E402
from raggy_notes.ingest.types import NotePayload  # noqa: E402
from raggy_notes.retrieval.vector_store import ScoredNote  # noqa: E402

DIM = 4


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset cached settings and environment between tests."""
    from raggy_notes.core import config

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setenv("RAGGY_CONFIG", str(tmp_path / "config.yaml"))
    monkeypatch.setenv("RAGGY_LOG_PATH", str(tmp_path / "raggy.log"))
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
    root.handlers = handlers
    root.setLevel(level)


class FakeInference:
    """Stands in for ``InferenceClient``; records every call."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, answer: str = "answer") -> None:
        self.vectors = vectors or {}
        self.answer = answer
        self.fail_embed_for: set[str] = set()
        self.fail_complete = False
        self.embed_calls: list[str] = []
        self.prompts: list[str] = []

    async def list_models(self) -> list[str]:
        return ["fake-model"]

    async def embed(self, text: str) -> list[list[float]]:
        self.embed_calls.append(text)
        if text in self.fail_embed_for:
            raise InferenceError(f"cannot embed {text!r}")
        return [self.vectors.get(text, [1.0, 0.0, 0.0, 0.0])]

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail_complete:
            raise InferenceError("model offline")
        return self.answer


class FakeStore:
    """Stands in for ``VectorStore`` with canned search hits."""

    def __init__(self, hits: Sequence[ScoredNote] = (), dim: int = DIM) -> None:
        self.hits = list(hits)
        self.dim = dim
        self.fail_search = False
        self.search_calls: list[tuple[list[float], int]] = []
        self.upserted: list = []
        self.fail_delete = False
        self.delete_calls: list[tuple[str, str]] = []

    async def search(self, query_vector: Sequence[float], limit: int) -> list[ScoredNote]:
        self.search_calls.append((list(query_vector), limit))
        if self.fail_search:
            raise VectorStoreError("store offline")
        return self.hits[:limit]

    async def upsert(self, note) -> None:
        note.validate(self.dim)
        self.upserted.append(note)

    async def delete_stale(self, file_path: str, keep_id: str) -> None:
        self.delete_calls.append((file_path, keep_id))
        if self.fail_delete:
            raise VectorStoreError("delete rejected")


def make_hit(title: str, content: str, score: float = 0.9, path: str | None = None) -> ScoredNote:
    return ScoredNote(
        id=f"id-{title}",
        score=score,
        payload=NotePayload(title=title, content=content, file_path=path or f"/notes/{title}.md"),
    )


@pytest.fixture
def inference() -> FakeInference:
    return FakeInference()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    root = tmp_path / "notes"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.md").write_text("hello", encoding="utf-8")
    (root / "a" / "note.txt").write_text("not a note", encoding="utf-8")
    return root
