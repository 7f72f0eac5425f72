"""Retrieval-augmented completion."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, Sequence

from raggy_notes.core.errors import RaggyError, RetrievalError
from raggy_notes.core.logging import get_logger
from raggy_notes.core.metrics import RAG_STEP_LATENCY
from raggy_notes.llm.client import InferenceClient
from raggy_notes.retrieval.vector_store import ScoredNote, VectorStore
from raggy_notes.utils.text import truncate

logger = get_logger(__name__)

NO_NOTES_MARKER = "No relevant notes found."
CONTEXT_HEADER = "Here are some relevant notes from your knowledge base:\n\n"
SNIPPET_CHARS = 500
SYSTEM_INSTRUCTION = (
    "You are a helpful AI assistant with access to the user's notes. "
    "Answer the following question using the provided notes when relevant. "
    "If the notes don't contain relevant information, just answer based on your knowledge."
)


def build_context(hits: Sequence[ScoredNote]) -> str:
    """Format ranked hits as the context block of the prompt."""
    if not hits:
        return NO_NOTES_MARKER
    parts = [CONTEXT_HEADER]
    for rank, hit in enumerate(hits, start=1):
        snippet = truncate(hit.payload.content, SNIPPET_CHARS)
        parts.append(f"Note {rank}: {hit.payload.title} (relevance: {hit.score:.2f})\n{snippet}\n\n")
    return "".join(parts)


def build_prompt(query: str, context: str) -> str:
    return f"{SYSTEM_INSTRUCTION}\n\n{context}\n\nUser question: {query}\nHelpful answer:"


class RetrievalEngine:
    """Embed a question, fetch matching notes and ask the model with them as context."""

    def __init__(self, inference: InferenceClient, store: VectorStore, top_k: int = 5) -> None:
        self.inference = inference
        self.store = store
        self.top_k = top_k

    async def answer(self, query: str) -> str:
        """Return the completion text for ``query``.

        Only the first query embedding is searched with. Any step failure is
        raised as ``RetrievalError`` naming the step; nothing is retried.
        """
        with _step("embed"):
            embeddings = await self.inference.embed(query)
        with _step("search"):
            hits = await self.store.search(embeddings[0] if embeddings else [], self.top_k)
        prompt = build_prompt(query, build_context(hits))
        logger.debug("Augmented prompt with %s notes (%s chars)", len(hits), len(prompt))
        with _step("complete"):
            return await self.inference.complete(prompt)


@contextmanager
def _step(name: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    except RaggyError as exc:
        logger.warning("RAG step %s failed: %s", name, exc)
        raise RetrievalError(name, exc) from exc
    finally:
        RAG_STEP_LATENCY.labels(step=name).observe(time.perf_counter() - start)


__all__ = [
    "RetrievalEngine",
    "build_context",
    "build_prompt",
    "NO_NOTES_MARKER",
    "SNIPPET_CHARS",
    "SYSTEM_INSTRUCTION",
]
