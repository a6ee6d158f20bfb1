"""Small text helpers shared by the retrieval sources."""

from __future__ import annotations

from typing import Iterable, List

TRUNCATION_MARKER = "\n…(truncated)"


def truncate_block(text: str, limit: int) -> str:
    """Cap ``text`` at ``limit`` characters, appending a marker when cut."""
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def merge_unique(*groups: Iterable[str]) -> List[str]:
    """Concatenate string groups keeping first-seen order and dropping repeats."""
    seen = set()
    merged: List[str] = []
    for group in groups:
        for item in group:
            if item and item not in seen:
                seen.add(item)
                merged.append(item)
    return merged
