"""Exception hierarchy for Raggy Notes."""

from __future__ import annotations


class RaggyError(Exception):
    """Base class for every error raised by this package."""


class NoteSourceError(RaggyError):
    """File or directory access failed."""


class SerializationError(RaggyError):
    """Data could not be encoded or decoded."""


class ConfigurationError(RaggyError):
    """Configuration is missing or invalid."""


class InferenceError(RaggyError):
    """The language-model inference service failed or rejected a request."""


class VectorStoreError(RaggyError):
    """The vector database service failed or rejected a request."""


class CollectionSchemaError(VectorStoreError):
    """An existing collection does not match the requested vector parameters."""


class EmptyQueryError(VectorStoreError):
    """A similarity search was requested without a query vector."""


class EmbeddingDimensionError(RaggyError):
    """An embedding vector has the wrong number of dimensions."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"expected {expected} dimensions, got {actual}")
        self.expected = expected
        self.actual = actual


class RetrievalError(RaggyError):
    """A step of the retrieval-augmented completion failed."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.cause = cause


class SessionError(RaggyError):
    """The interactive terminal session failed."""


class UnexpectedError(RaggyError):
    """Catch-all for failures without a more specific kind."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"unexpected {type(cause).__name__}: {cause}")
        self.cause = cause


__all__ = [
    "RaggyError",
    "NoteSourceError",
    "SerializationError",
    "ConfigurationError",
    "InferenceError",
    "VectorStoreError",
    "CollectionSchemaError",
    "EmptyQueryError",
    "EmbeddingDimensionError",
    "RetrievalError",
    "SessionError",
    "UnexpectedError",
]
