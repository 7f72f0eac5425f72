"""Text processing helpers."""

from __future__ import annotations

ELLIPSIS = "..."


def truncate(text: str, limit: int) -> str:
    """Return the first ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}{ELLIPSIS}"
