"""Qdrant-backed note vector store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import httpx
from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from raggy_notes.core.config import Settings
from raggy_notes.core.errors import CollectionSchemaError, EmptyQueryError, VectorStoreError
from raggy_notes.core.logging import get_logger
from raggy_notes.ingest.types import NotePayload, NoteVector

logger = get_logger(__name__)

# local mode (":memory:" or on-disk) reports missing collections as ValueError
_STORE_ERRORS = (UnexpectedResponse, ResponseHandlingException, httpx.HTTPError, ValueError)

DISTANCES: dict[str, models.Distance] = {
    "cosine": models.Distance.COSINE,
    "dot": models.Distance.DOT,
    "euclid": models.Distance.EUCLID,
    "manhattan": models.Distance.MANHATTAN,
}


@dataclass(slots=True)
class ScoredNote:
    """One similarity search hit."""

    id: str
    score: float
    payload: NotePayload
    vector: list[float] | None = None


class VectorStore:
    """Collection management, upserts and top-K search for note vectors."""

    def __init__(self, client: AsyncQdrantClient, collection_name: str, dim: int) -> None:
        self.client = client
        self.collection_name = collection_name
        self.dim = dim

    @classmethod
    def from_settings(cls, settings: Settings) -> "VectorStore":
        return cls(
            AsyncQdrantClient(location=settings.qdrant_url),
            collection_name=settings.collection_name,
            dim=settings.embedding_size,
        )

    async def list_collections(self) -> list[str]:
        try:
            response = await self.client.get_collections()
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Failed to list collections: {exc}") from exc
        return [collection.name for collection in response.collections]

    async def ensure_collection(
        self,
        name: str | None = None,
        dim: int | None = None,
        distance: str = "cosine",
    ) -> bool:
        """Create the collection if absent. Returns True when it was created.

        An existing collection is never dropped or altered; if its vector size
        or distance differs from the request, ``CollectionSchemaError`` is raised.
        """
        name = name or self.collection_name
        dim = dim or self.dim
        metric = DISTANCES.get(distance)
        if metric is None:
            raise VectorStoreError(f"Unsupported distance metric: {distance}")

        existing = await self.list_collections()
        logger.info("Connected to Qdrant. Found %s collections", len(existing))
        if name in existing:
            logger.info("Collection '%s' already exists", name)
            await self._check_schema(name, dim, metric)
            return False

        try:
            await self.client.create_collection(
                collection_name=name,
                vectors_config=models.VectorParams(size=dim, distance=metric, on_disk=False),
            )
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Failed to create collection '{name}': {exc}") from exc
        logger.info("Created collection '%s' (size=%s, distance=%s)", name, dim, distance)
        return True

    async def upsert(self, note: NoteVector) -> None:
        """Write one record per embedding vector, all under the note's id."""
        note.validate(self.dim)
        record = note.payload.to_record()
        points = [
            models.PointStruct(id=note.id, vector=vector, payload=record)
            for vector in note.embeddings
        ]
        try:
            await self.client.upsert(collection_name=self.collection_name, points=points)
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Failed to upsert note {note.id}: {exc}") from exc
        logger.info("Saved vector with id: %s", note.id)

    async def delete_stale(self, file_path: str, keep_id: str) -> None:
        """Delete records for ``file_path`` other than ``keep_id``."""
        selector = models.FilterSelector(
            filter=models.Filter(
                must=[models.FieldCondition(key="file_path", match=models.MatchValue(value=file_path))],
                must_not=[models.HasIdCondition(has_id=[keep_id])],
            )
        )
        try:
            await self.client.delete(collection_name=self.collection_name, points_selector=selector)
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Failed to delete stale records for {file_path}: {exc}") from exc

    async def search(self, query_vector: Sequence[float], limit: int) -> list[ScoredNote]:
        """Return up to ``limit`` hits ordered by descending score."""
        if not query_vector:
            raise EmptyQueryError("Empty query embedding provided")
        try:
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=list(query_vector),
                limit=limit,
                with_payload=True,
                with_vectors=True,
            )
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Search failed: {exc}") from exc
        return [
            ScoredNote(
                id=str(point.id),
                score=float(point.score),
                payload=NotePayload.from_record(point.payload),
                vector=_plain_vector(point.vector),
            )
            for point in response.points
        ]

    async def close(self) -> None:
        await self.client.close()

    async def _check_schema(self, name: str, dim: int, metric: models.Distance) -> None:
        try:
            info = await self.client.get_collection(collection_name=name)
        except _STORE_ERRORS as exc:
            raise VectorStoreError(f"Failed to read collection '{name}': {exc}") from exc
        params = info.config.params.vectors
        if not isinstance(params, models.VectorParams):
            raise CollectionSchemaError(f"Collection '{name}' uses named vectors; expected a single vector")
        if params.size != dim or params.distance != metric:
            raise CollectionSchemaError(
                f"Collection '{name}' has size={params.size}, distance={params.distance}; "
                f"expected size={dim}, distance={metric}"
            )


def _plain_vector(vector: Any) -> list[float] | None:
    if isinstance(vector, list):
        return [float(value) for value in vector]
    return None


__all__ = ["VectorStore", "ScoredNote", "DISTANCES"]
