"""Indexing pipeline orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from raggy_notes.core.config import Settings
from raggy_notes.core.errors import RaggyError
from raggy_notes.core.logging import get_logger
from raggy_notes.core.metrics import NOTES_INDEXED
from raggy_notes.ingest.loaders import load_note
from raggy_notes.ingest.scanner import scan_notes
from raggy_notes.ingest.types import NoteVector
from raggy_notes.llm.client import InferenceClient
from raggy_notes.retrieval.vector_store import VectorStore

logger = get_logger(__name__)


class IndexingPipeline:
    """Read, embed and store a batch of notes, skipping notes that fail."""

    def __init__(self, inference: InferenceClient, store: VectorStore) -> None:
        self.inference = inference
        self.store = store

    async def index_directory(self, settings: Settings) -> list[Path]:
        """Scan the configured root and index what it holds. Returns the scanned files."""
        root = settings.require_scan_path()
        files = scan_notes(root, settings.note_extensions)
        logger.info("Found %s note files to process", len(files))
        await self.index_files(files)
        return files

    async def index_files(self, files: Sequence[Path]) -> None:
        """Process ``files`` in order. Per-note failures are logged, never raised."""
        total = len(files)
        logger.info("Processing %s note files", total)
        for position, path in enumerate(files, start=1):
            logger.info("Processing file %s/%s: %s", position, total, path)
            await self._index_one(path)
        logger.info("Finished processing all note files")

    async def _index_one(self, path: Path) -> None:
        try:
            note = load_note(path)
        except RaggyError as exc:
            logger.warning("Error reading %s: %s", path, exc)
            NOTES_INDEXED.labels(outcome="read_failed").inc()
            return

        try:
            embeddings = await self.inference.embed(note.content)
            vector = NoteVector.create(
                title=note.title,
                content=note.content,
                file_path=path,
                embeddings=embeddings,
                dim=self.store.dim,
            )
        except RaggyError as exc:
            logger.warning("Error generating embedding for %s: %s", path, exc)
            NOTES_INDEXED.labels(outcome="embed_failed").inc()
            return

        try:
            await self.store.upsert(vector)
        except RaggyError as exc:
            logger.warning("Error saving vector for %s: %s", path, exc)
            NOTES_INDEXED.labels(outcome="upsert_failed").inc()
            return
        NOTES_INDEXED.labels(outcome="indexed").inc()

        try:
            await self.store.delete_stale(vector.payload.file_path, keep_id=vector.id)
        except RaggyError as exc:
            # the new record is stored; older ones for this path remain
            logger.warning("Error removing stale records for %s: %s", path, exc)
            NOTES_INDEXED.labels(outcome="cleanup_failed").inc()


__all__ = ["IndexingPipeline"]
