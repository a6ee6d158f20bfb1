"""
Structured Knowledge Router

Maps a free-text question onto structured policy content using two keyword
tables:

- keyword -> whole policy documents (academic honesty, conduct, ...)
- keyword -> dot paths inside the primary community guide

Matching is case-insensitive substring containment. Targets accumulate into
de-duplicated sets rendered in table order. When no guide keyword matches, a
small set of general guide sections is used instead of returning nothing.

Output order is fixed: policy document blocks first, then guide sections.
Every block is capped at ``max_chars``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .flatten import flatten, path_label
from .keywords import DEFAULT_GUIDE_PATHS, GUIDE_SECTION_KEYWORDS, POLICY_DOCUMENT_KEYWORDS
from .store import DocumentStore
from ..core.text import truncate_block

logger = logging.getLogger("aura.router")


@dataclass
class RoutedKnowledge:
    document_blocks: List[str] = field(default_factory=list)
    section_blocks: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n\n".join(self.document_blocks + self.section_blocks)


def match_targets(query: str, table: Mapping[str, Sequence[str]]) -> List[str]:
    """Collect the targets of every key contained in ``query``, table order, no repeats."""
    q = query.lower()
    matched: Dict[str, None] = {}
    for keyword, targets in table.items():
        if keyword in q:
            for target in targets:
                matched.setdefault(target, None)
    return list(matched)


class StructuredKnowledgeRouter:
    """Keyword-to-path routing over the loaded policy documents."""

    def __init__(
        self,
        store: DocumentStore,
        guide_document_id: str = "community_guide",
        max_chars: int = 3000,
        document_keywords: Optional[Mapping[str, Sequence[str]]] = None,
        section_keywords: Optional[Mapping[str, Sequence[str]]] = None,
        default_paths: Sequence[str] = DEFAULT_GUIDE_PATHS,
    ) -> None:
        self._store = store
        self._guide_id = guide_document_id
        self._max_chars = max_chars
        self._document_keywords = document_keywords or POLICY_DOCUMENT_KEYWORDS
        self._section_keywords = section_keywords or GUIDE_SECTION_KEYWORDS
        self._default_paths = tuple(default_paths)

    def route(self, query: str) -> RoutedKnowledge:
        result = RoutedKnowledge()

        # -------------------------------------------------------------
        # Whole policy documents
        # -------------------------------------------------------------
        for doc_id in match_targets(query, self._document_keywords):
            doc = self._store.get(doc_id)
            if doc is None:
                logger.debug("Routed to missing policy document %r", doc_id)
                continue
            body = flatten(doc.data)
            result.document_blocks.append(
                truncate_block(f"[{doc.title}]\n{body}", self._max_chars)
            )
            result.sources.append(doc.title)

        # -------------------------------------------------------------
        # Community guide sections
        # -------------------------------------------------------------
        paths = match_targets(query, self._section_keywords) or list(self._default_paths)

        guide = self._store.get(self._guide_id)
        if guide is None:
            return result

        for dot_path in paths:
            node = guide.data.lookup(dot_path)
            if node is None:
                continue
            text = flatten(node, path_label(dot_path))
            if text:
                result.section_blocks.append(truncate_block(text, self._max_chars))

        if result.section_blocks and guide.title not in result.sources:
            result.sources.append(guide.title)

        return result
