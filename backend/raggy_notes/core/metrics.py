"""Prometheus metrics instrumentation."""

from __future__ import annotations

from pathlib import Path

from prometheus_client import CollectorRegistry, Counter, Histogram, write_to_textfile

REGISTRY = CollectorRegistry()

NOTES_INDEXED = Counter(
    "raggy_notes_indexed_total",
    "Notes processed by the indexing pipeline",
    labelnames=("outcome",),
    registry=REGISTRY,
)

RAG_STEP_LATENCY = Histogram(
    "raggy_rag_step_latency_seconds",
    "Latency of retrieval-augmented completion steps",
    labelnames=("step",),
    registry=REGISTRY,
)


def write_metrics(path: Path) -> None:
    """Dump the registry in node-exporter textfile format."""
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(path), REGISTRY)


__all__ = ["REGISTRY", "NOTES_INDEXED", "RAG_STEP_LATENCY", "write_metrics"]
