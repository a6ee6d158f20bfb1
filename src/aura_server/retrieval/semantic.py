"""
Semantic Retriever

Adapter over the vector index that turns a question into a short list of
relevant unstructured text chunks.

Behavior
--------
- Vector hits below ``min_score`` are discarded.
- When no vector hit survives, a keyword fallback scans every stored chunk
  for any query token (``[a-z0-9]+`` runs of at least three characters).
- The index is populated lazily on first use when it is empty. Concurrent
  callers share one population task; a failed population is cleared so a
  later request can retry.
- Every index interaction is bounded by ``timeout``. A slow or failing index
  produces no hits rather than an error; population keeps running in the
  background.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from ..core.text import merge_unique, truncate_block
from ..embeddings.models import KnowledgeChunk, ScoredChunk
from ..embeddings.vector_index import SemanticIndex

logger = logging.getLogger("aura.semantic")

Populator = Callable[[], Awaitable[Any]]

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")
MIN_TOKEN_LENGTH = 3


def query_tokens(query: str) -> List[str]:
    """Lower-cased alphanumeric runs of at least three characters."""
    return [t for t in TOKEN_PATTERN.findall(query.lower()) if len(t) >= MIN_TOKEN_LENGTH]


def source_label(chunk: KnowledgeChunk) -> str:
    if chunk.page_number is not None:
        return f"{chunk.source_name} p. {chunk.page_number}"
    return chunk.source_name


@dataclass
class SemanticResult:
    hits: List[ScoredChunk] = field(default_factory=list)
    blocks: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n\n".join(self.blocks)


class SemanticRetriever:
    """
    Threshold-filtered vector search with a keyword fallback.

    Parameters
    ----------
    index : SemanticIndex
        Vector index collaborator.

    populator : Optional[Populator]
        Coroutine factory that fills an empty index. ``None`` disables lazy
        population.

    min_score : float
        Vector hits scoring below this are dropped.

    fallback_limit : int
        Maximum number of keyword fallback hits.

    timeout : float
        Seconds allowed for one search, including any wait on population.

    max_chunk_chars : int
        Per-chunk character cap in rendered blocks.
    """

    def __init__(
        self,
        index: SemanticIndex,
        populator: Optional[Populator] = None,
        min_score: float = 0.08,
        fallback_limit: int = 6,
        timeout: float = 10.0,
        max_chunk_chars: int = 1500,
    ) -> None:
        self._index = index
        self._populator = populator
        self._min_score = min_score
        self._fallback_limit = fallback_limit
        self._timeout = timeout
        self._max_chunk_chars = max_chunk_chars

        self._populated = False
        self._populate_task: Optional[asyncio.Task] = None
        self._populate_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(self, query: str, k: int = 6) -> List[ScoredChunk]:
        """
        Return ranked chunks for ``query``; never raises for index failures.
        """
        try:
            return await asyncio.wait_for(self._search(query, k), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Semantic search timed out after %.1fs; continuing without chunks.", self._timeout)
        except Exception as exc:
            logger.warning("Semantic search failed (%s); continuing without chunks.", type(exc).__name__)
        return []

    async def retrieve(self, query: str, k: int = 6) -> SemanticResult:
        """Search and render hits as tagged context blocks."""
        hits = await self.search(query, k)

        blocks: List[str] = []
        labels: List[str] = []
        for hit in hits:
            label = source_label(hit.chunk)
            labels.append(label)
            blocks.append(f"[{label}]\n{truncate_block(hit.chunk.content, self._max_chunk_chars)}")

        return SemanticResult(hits=hits, blocks=blocks, sources=merge_unique(labels))

    def keyword_fallback(self, query: str) -> List[ScoredChunk]:
        tokens = query_tokens(query)
        if not tokens:
            return []

        results: List[ScoredChunk] = []
        for chunk in self._index.chunks():
            content = chunk.content.lower()
            if any(token in content for token in tokens):
                results.append(ScoredChunk(chunk, 0.0))
                if len(results) >= self._fallback_limit:
                    break
        return results

    async def ensure_populated(self) -> None:
        """
        Run the populator once if the index is empty.

        Concurrent callers await the same task. The task itself is shielded,
        so a caller's timeout does not abort population.
        """
        if self._populated or self._populator is None:
            return

        if self._index.count() > 0:
            self._populated = True
            return

        async with self._populate_lock:
            if self._populate_task is None:
                self._populate_task = asyncio.create_task(self._populate())
            task = self._populate_task

        await asyncio.shield(task)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _search(self, query: str, k: int) -> List[ScoredChunk]:
        await self.ensure_populated()

        hits = [h for h in await self._index.search(query, k) if h.score >= self._min_score]
        if hits:
            return hits

        fallback = self.keyword_fallback(query)
        if fallback:
            logger.debug("No vector hits above %.2f; keyword fallback found %d chunks.", self._min_score, len(fallback))
        return fallback

    async def _populate(self) -> None:
        try:
            logger.info("Vector index is empty; populating.")
            await self._populator()
            self._populated = True
            logger.info("Vector index populated with %d chunks.", self._index.count())
        except Exception:
            logger.exception("Vector index population failed; will retry on a later request.")
        finally:
            if not self._populated:
                self._populate_task = None
