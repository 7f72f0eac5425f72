"""Tests for the indexing pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import FakeInference, FakeStore
from raggy_notes.core.config import Settings
from raggy_notes.core.errors import ConfigurationError, VectorStoreError
from raggy_notes.core.metrics import REGISTRY
from raggy_notes.ingest.pipeline import IndexingPipeline


def _write_notes(root: Path, names: list[str]) -> list[Path]:
    paths = []
    for name in names:
        path = root / f"{name}.md"
        path.write_text(f"{name} text")
        paths.append(path)
    return paths


@pytest.mark.asyncio
async def test_one_failed_embedding_does_not_abort_batch(tmp_path: Path, store: FakeStore) -> None:
    inference = FakeInference()
    inference.fail_embed_for = {"second text"}
    files = _write_notes(tmp_path, ["first", "second", "third"])

    await IndexingPipeline(inference, store).index_files(files)

    assert [note.payload.title for note in store.upserted] == ["first", "third"]
    assert inference.embed_calls == ["first text", "second text", "third text"]


@pytest.mark.asyncio
async def test_wrong_dimension_is_skipped_before_store(tmp_path: Path, store: FakeStore) -> None:
    inference = FakeInference(vectors={"bad text": [1.0, 2.0]})
    files = _write_notes(tmp_path, ["bad", "good"])

    await IndexingPipeline(inference, store).index_files(files)

    assert [note.payload.title for note in store.upserted] == ["good"]


@pytest.mark.asyncio
async def test_upsert_failure_continues(tmp_path: Path, inference: FakeInference) -> None:
    class FlakyStore(FakeStore):
        async def upsert(self, note) -> None:
            if note.payload.title == "first":
                raise VectorStoreError("write rejected")
            await super().upsert(note)

    store = FlakyStore()
    files = _write_notes(tmp_path, ["first", "second"])

    await IndexingPipeline(inference, store).index_files(files)

    assert [note.payload.title for note in store.upserted] == ["second"]


@pytest.mark.asyncio
async def test_unreadable_note_is_skipped(tmp_path: Path, inference: FakeInference, store: FakeStore) -> None:
    broken = tmp_path / "broken.md"
    broken.write_bytes(b"\xff\xfe")
    files = [broken, *_write_notes(tmp_path, ["fine"])]

    await IndexingPipeline(inference, store).index_files(files)

    assert [note.payload.title for note in store.upserted] == ["fine"]


@pytest.mark.asyncio
async def test_index_directory_uses_configured_root(notes_dir: Path, inference: FakeInference, store: FakeStore) -> None:
    files = await IndexingPipeline(inference, store).index_directory(Settings(scan_path=notes_dir))

    assert files == [notes_dir / "a" / "b.md"]
    (note,) = store.upserted
    assert note.payload.title == "b"
    assert note.payload.content == "hello"
    assert note.payload.file_path == str(notes_dir / "a" / "b.md")


@pytest.mark.asyncio
async def test_index_directory_requires_scan_path(inference: FakeInference, store: FakeStore) -> None:
    with pytest.raises(ConfigurationError):
        await IndexingPipeline(inference, store).index_directory(Settings())


@pytest.mark.asyncio
async def test_reindex_removes_older_records_for_path(tmp_path: Path, inference: FakeInference, store: FakeStore) -> None:
    files = _write_notes(tmp_path, ["first"])
    pipeline = IndexingPipeline(inference, store)

    await pipeline.index_files(files)
    await pipeline.index_files(files)

    first, second = store.upserted
    assert first.id != second.id
    assert store.delete_calls == [
        (str(files[0]), first.id),
        (str(files[0]), second.id),
    ]


def _indexed(outcome: str) -> float:
    return REGISTRY.get_sample_value("raggy_notes_indexed_total", {"outcome": outcome}) or 0.0


@pytest.mark.asyncio
async def test_cleanup_failure_keeps_new_record(
    tmp_path: Path, inference: FakeInference, store: FakeStore, caplog: pytest.LogCaptureFixture
) -> None:
    store.fail_delete = True
    files = _write_notes(tmp_path, ["first", "second"])
    indexed, cleanup_failed, upsert_failed = _indexed("indexed"), _indexed("cleanup_failed"), _indexed("upsert_failed")

    with caplog.at_level(logging.WARNING):
        await IndexingPipeline(inference, store).index_files(files)

    assert [note.payload.title for note in store.upserted] == ["first", "second"]
    assert len(store.delete_calls) == 2
    assert "Error removing stale records for" in caplog.text
    assert "Error saving vector" not in caplog.text
    assert _indexed("indexed") == indexed + 2
    assert _indexed("cleanup_failed") == cleanup_failed + 2
    assert _indexed("upsert_failed") == upsert_failed
