"""
Semantic Index Adapter

``SemanticIndex`` is the narrow interface the retrieval layer depends on.
``FaissVectorIndex`` is the default implementation: it embeds chunk text with
``Embedder`` and stores the vectors in a persistent ``FaissIndex``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from .embedder import Embedder
from .index import FaissIndex, FaissPersistenceError
from .models import KnowledgeChunk, ScoredChunk

logger = logging.getLogger("aura.vector_index")


# ---------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------

class SemanticIndex(Protocol):
    """Vector index collaborator consumed by ``SemanticRetriever``."""

    async def add_chunk(
        self,
        chunk_id: str,
        content: str,
        source_name: str,
        page_hint: Optional[int] = None,
    ) -> None:
        ...

    async def add_chunks(self, chunks: Sequence[KnowledgeChunk]) -> None:
        ...

    async def search(self, query: str, k: int) -> List[ScoredChunk]:
        ...

    def count(self) -> int:
        ...

    def chunks(self) -> List[KnowledgeChunk]:
        ...


# ---------------------------------------------------------------------
# FAISS-backed implementation
# ---------------------------------------------------------------------

class FaissVectorIndex:
    """
    Async adapter that pairs an ``Embedder`` with a ``FaissIndex``.

    Parameters
    ----------
    index : FaissIndex
        Storage for vectors and chunk metadata.

    embedder : Embedder
        Client used to embed both chunks and queries.

    persist : bool
        When true, ``add_chunks`` writes the index to disk after each batch.
    """

    def __init__(
        self,
        index: FaissIndex,
        embedder: Embedder,
        persist: bool = True,
    ) -> None:
        self._index = index
        self._embedder = embedder
        self._persist = persist

    @classmethod
    def open(
        cls,
        embedder: Embedder,
        index_path: Optional[str] = None,
        meta_path: Optional[str] = None,
    ) -> "FaissVectorIndex":
        """
        Build an adapter over the on-disk index, starting empty when the
        files are missing or unreadable.
        """
        index = FaissIndex(index_path=index_path, meta_path=meta_path)
        try:
            index.load()
        except FaissPersistenceError:
            logger.exception("Failed to load persisted FAISS index; starting empty.")
            index = FaissIndex(index_path=index_path, meta_path=meta_path)

        logger.info("Vector index opened with %d chunks", index.count())
        return cls(index, embedder)

    # ------------------------------------------------------------------
    # SemanticIndex API
    # ------------------------------------------------------------------

    async def add_chunk(
        self,
        chunk_id: str,
        content: str,
        source_name: str,
        page_hint: Optional[int] = None,
    ) -> None:
        chunk = KnowledgeChunk(
            id=chunk_id,
            content=content,
            source_name=source_name,
            page_number=page_hint,
        )
        await self.add_chunks([chunk])

    async def add_chunks(self, chunks: Sequence[KnowledgeChunk]) -> None:
        """Embed and store a batch of chunks."""
        if not chunks:
            return

        embeddings = await self._embedder.embed([c.content for c in chunks])
        self._index.add_chunks(list(chunks), embeddings)

        if self._persist:
            self._index.save()

    async def search(self, query: str, k: int) -> List[ScoredChunk]:
        if self._index.count() == 0:
            return []

        query_emb = await self._embedder.embed_one(query)
        hits: List[Tuple[KnowledgeChunk, float]] = self._index.search(query_emb, k)
        return [ScoredChunk(chunk, score) for chunk, score in hits]

    def count(self) -> int:
        return self._index.count()

    def chunks(self) -> List[KnowledgeChunk]:
        return self._index.chunks()
