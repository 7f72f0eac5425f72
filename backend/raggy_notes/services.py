"""Service wiring and the startup connectivity check."""

from __future__ import annotations

from dataclasses import dataclass

from raggy_notes.core.config import Settings
from raggy_notes.core.logging import get_logger
from raggy_notes.ingest.pipeline import IndexingPipeline
from raggy_notes.llm.client import InferenceClient
from raggy_notes.retrieval.engine import RetrievalEngine
from raggy_notes.retrieval.vector_store import VectorStore

logger = get_logger(__name__)


@dataclass(slots=True)
class Services:
    settings: Settings
    inference: InferenceClient
    store: VectorStore

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        return cls(
            settings=settings,
            inference=InferenceClient.from_settings(settings),
            store=VectorStore.from_settings(settings),
        )

    def engine(self) -> RetrievalEngine:
        return RetrievalEngine(self.inference, self.store, top_k=self.settings.rag_top_k)

    def pipeline(self) -> IndexingPipeline:
        return IndexingPipeline(self.inference, self.store)

    async def check_connectivity(self) -> None:
        """Check both services and prepare the collection; any failure is fatal to the caller."""
        models = await self.inference.list_models()
        logger.info("LLM models available: [%s]", ", ".join(models))
        await self.store.ensure_collection(
            self.settings.collection_name,
            self.settings.embedding_size,
            self.settings.distance,
        )

    async def close(self) -> None:
        await self.store.close()


__all__ = ["Services"]
