"""Client for the Ollama inference service."""

from __future__ import annotations

from typing import Any

import httpx
import ollama

from raggy_notes.core.config import Settings
from raggy_notes.core.errors import InferenceError
from raggy_notes.core.logging import get_logger

logger = get_logger(__name__)

_TRANSPORT_ERRORS = (ollama.ResponseError, ollama.RequestError, httpx.HTTPError, ConnectionError)


class InferenceClient:
    """Embeddings, completions and model listing against an Ollama server.

    Any timeout is the caller's business; none is imposed here.
    """

    def __init__(self, client: Any, completion_model: str, embedding_model: str) -> None:
        self._client = client
        self.completion_model = completion_model
        self.embedding_model = embedding_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "InferenceClient":
        return cls(
            ollama.AsyncClient(host=settings.ollama_host),
            completion_model=settings.completion_model,
            embedding_model=settings.embedding_model,
        )

    async def list_models(self) -> list[str]:
        try:
            response = await self._client.list()
        except _TRANSPORT_ERRORS as exc:
            raise InferenceError(f"Failed to list models: {exc}") from exc
        return [model.model for model in response.models]

    async def embed(self, text: str) -> list[list[float]]:
        """Return the embedding vector(s) for ``text``; dimensionality is not checked."""
        try:
            response = await self._client.embed(model=self.embedding_model, input=text)
        except _TRANSPORT_ERRORS as exc:
            raise InferenceError(f"Embedding request failed: {exc}") from exc
        return [list(vector) for vector in response.embeddings]

    async def complete(self, prompt: str) -> str:
        try:
            response = await self._client.generate(model=self.completion_model, prompt=prompt)
        except _TRANSPORT_ERRORS as exc:
            raise InferenceError(f"Completion request failed: {exc}") from exc
        return response.response


__all__ = ["InferenceClient"]
