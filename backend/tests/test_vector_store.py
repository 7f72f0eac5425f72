"""Tests for the Qdrant vector store wrapper."""

from __future__ import annotations

import logging

import pytest
import pytest_asyncio
from qdrant_client import AsyncQdrantClient

from conftest import FakeInference
from raggy_notes.core.config import Settings
from raggy_notes.core.errors import CollectionSchemaError, EmptyQueryError, EmbeddingDimensionError
from raggy_notes.ingest.types import NoteVector
from raggy_notes.retrieval.vector_store import VectorStore
from raggy_notes.services import Services

COLLECTION = "test_notes"


@pytest_asyncio.fixture
async def vector_store():
    store = VectorStore(AsyncQdrantClient(location=":memory:"), collection_name=COLLECTION, dim=3)
    await store.ensure_collection()
    yield store
    await store.close()


def _note(title: str, vector: list[float], path: str | None = None) -> NoteVector:
    return NoteVector.create(title, f"{title} body", path or f"/notes/{title}.md", [vector], dim=3)


@pytest.mark.asyncio
async def test_ensure_collection_is_idempotent(vector_store: VectorStore) -> None:
    assert await vector_store.ensure_collection() is False
    assert await vector_store.list_collections() == [COLLECTION]


@pytest.mark.asyncio
async def test_ensure_collection_rejects_schema_drift(vector_store: VectorStore) -> None:
    with pytest.raises(CollectionSchemaError):
        await vector_store.ensure_collection(COLLECTION, dim=5)
    with pytest.raises(CollectionSchemaError):
        await vector_store.ensure_collection(COLLECTION, dim=3, distance="dot")


@pytest.mark.asyncio
async def test_upserted_note_is_found_by_its_own_embedding(vector_store: VectorStore) -> None:
    target = _note("alpha", [1.0, 0.0, 0.0])
    await vector_store.upsert(target)
    await vector_store.upsert(_note("beta", [0.0, 1.0, 0.0]))

    hits = await vector_store.search([1.0, 0.0, 0.0], limit=1)

    assert [hit.id for hit in hits] == [target.id]
    assert hits[0].payload.title == "alpha"
    assert hits[0].payload.content == "alpha body"
    assert hits[0].payload.created_at == target.payload.created_at


@pytest.mark.asyncio
async def test_search_orders_by_descending_score(vector_store: VectorStore) -> None:
    await vector_store.upsert(_note("far", [0.0, 0.0, 1.0]))
    await vector_store.upsert(_note("near", [0.9, 0.1, 0.0]))
    await vector_store.upsert(_note("mid", [0.5, 0.5, 0.0]))

    hits = await vector_store.search([1.0, 0.0, 0.0], limit=10)

    assert [hit.payload.title for hit in hits] == ["near", "mid", "far"]
    assert hits[0].score >= hits[1].score >= hits[2].score


@pytest.mark.asyncio
async def test_delete_stale_replaces_older_records_for_path(vector_store: VectorStore) -> None:
    old = _note("draft", [1.0, 0.0, 0.0], path="/notes/draft.md")
    new = _note("draft", [1.0, 0.1, 0.0], path="/notes/draft.md")
    other = _note("other", [1.0, 0.0, 0.1])
    for note in (old, new, other):
        await vector_store.upsert(note)

    await vector_store.delete_stale("/notes/draft.md", keep_id=new.id)

    ids = {hit.id for hit in await vector_store.search([1.0, 0.0, 0.0], limit=10)}
    assert ids == {new.id, other.id}


@pytest.mark.asyncio
async def test_upsert_checks_dimensions_before_calling_store(vector_store: VectorStore) -> None:
    note = _note("ok", [1.0, 0.0, 0.0])
    note.embeddings.append([1.0])
    with pytest.raises(EmbeddingDimensionError):
        await vector_store.upsert(note)
    assert await vector_store.search([1.0, 0.0, 0.0], limit=10) == []


class _ExplodingClient:
    def __getattr__(self, name: str):
        raise AssertionError(f"unexpected client call: {name}")


@pytest.mark.asyncio
async def test_empty_query_fails_without_network_call() -> None:
    store = VectorStore(_ExplodingClient(), collection_name=COLLECTION, dim=3)
    with pytest.raises(EmptyQueryError):
        await store.search([], limit=5)


@pytest.mark.asyncio
async def test_startup_check_lists_collections_once(caplog: pytest.LogCaptureFixture) -> None:
    client = AsyncQdrantClient(location=":memory:")
    list_calls = []
    original = client.get_collections

    async def counting_get_collections():
        list_calls.append(1)
        return await original()

    client.get_collections = counting_get_collections
    store = VectorStore(client, collection_name=COLLECTION, dim=3)
    services = Services(Settings(collection_name=COLLECTION, embedding_size=3), FakeInference(), store)

    with caplog.at_level(logging.INFO):
        await services.check_connectivity()
    await services.close()

    assert len(list_calls) == 1
    assert "Found 0 collections" in caplog.text
    assert f"Created collection '{COLLECTION}'" in caplog.text
