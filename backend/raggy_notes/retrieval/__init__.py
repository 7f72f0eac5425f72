"""Retrieval orchestration components."""

from .vector_store import ScoredNote, VectorStore
from .engine import RetrievalEngine

__all__ = ["VectorStore", "ScoredNote", "RetrievalEngine"]
