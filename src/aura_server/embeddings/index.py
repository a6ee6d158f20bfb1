"""
FAISS Chunk Index

Persistent cosine-similarity index over embedded knowledge chunks.

- Vectors live in an ``IndexIDMap2(IndexFlatIP)``; every vector is
  L2-normalised on the way in, so inner product equals cosine similarity.
- FAISS ids are dense integers assigned in insertion order; the chunk for
  each id is kept in a side table persisted as JSON next to the index file.
- All reads and writes go through one re-entrant lock.
"""

from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional, Sequence, Tuple

import faiss
import numpy as np

from .models import KnowledgeChunk
from ..config import settings


class FaissIndexError(RuntimeError):
    """Invalid vectors or a FAISS operation failure."""


class FaissPersistenceError(FaissIndexError):
    """The index or its chunk table could not be written or read."""


class FaissIndex:
    def __init__(
        self,
        index_path: Optional[str] = None,
        meta_path: Optional[str] = None,
    ) -> None:
        """
        Parameters
        ----------
        index_path : Optional[str]
            Where the FAISS index is written. Defaults to
            ``settings.vector_index_path``.

        meta_path : Optional[str]
            Where the chunk table is written. Defaults to
            ``settings.vector_meta_path``.
        """
        self._index_path = Path(index_path or settings.vector_index_path)
        self._meta_path = Path(meta_path or settings.vector_meta_path)

        self._index: Optional[faiss.IndexIDMap2] = None
        self._chunks: Dict[int, KnowledgeChunk] = {}
        self._next_id = 0

        self._lock = RLock()

    # ------------------------------------------------------------------
    # Vectors
    # ------------------------------------------------------------------

    def _as_matrix(self, vectors: Sequence[Sequence[float]]) -> np.ndarray:
        """
        Validate ``vectors`` and return them as a normalised float32 matrix.
        """
        if not vectors:
            raise FaissIndexError("No embedding vectors supplied")

        dim = len(vectors[0])
        if dim == 0:
            raise FaissIndexError("Embedding vectors must be non-empty")
        if any(len(v) != dim for v in vectors):
            raise FaissIndexError("Embedding vectors have mixed dimensions")
        if self._index is not None and self._index.d != dim:
            raise FaissIndexError(
                f"Embedding dimension {dim} does not match index dimension {self._index.d}"
            )

        matrix = np.asarray(vectors, dtype="float32")
        faiss.normalize_L2(matrix)
        return matrix

    def add_chunks(
        self,
        chunks: Sequence[KnowledgeChunk],
        embeddings: Sequence[Sequence[float]],
    ) -> None:
        """
        Store ``chunks`` with their embeddings, one vector per chunk.

        Nothing is stored when validation fails.
        """
        if not chunks:
            return
        if len(chunks) != len(embeddings):
            raise FaissIndexError(
                f"{len(chunks)} chunks but {len(embeddings)} embeddings"
            )

        with self._lock:
            matrix = self._as_matrix(embeddings)
            if self._index is None:
                self._index = faiss.IndexIDMap2(faiss.IndexFlatIP(matrix.shape[1]))

            ids = np.arange(self._next_id, self._next_id + len(chunks), dtype="int64")
            try:
                self._index.add_with_ids(matrix, ids)
            except RuntimeError as exc:
                raise FaissIndexError(f"FAISS add failed: {exc}") from exc

            self._chunks.update(zip(ids.tolist(), chunks))
            self._next_id += len(chunks)

    def search(
        self,
        query_emb: Sequence[float],
        k: int = 5,
    ) -> List[Tuple[KnowledgeChunk, float]]:
        """
        Return up to ``k`` ``(chunk, cosine score)`` pairs, best first.
        """
        with self._lock:
            if self._index is None or not self._chunks or k <= 0:
                return []

            scores, ids = self._index.search(self._as_matrix([query_emb]), k)

            return [
                (self._chunks[int(i)], float(s))
                for s, i in zip(scores[0], ids[0])
                if int(i) in self._chunks
            ]

    def count(self) -> int:
        with self._lock:
            return len(self._chunks)

    def chunks(self) -> List[KnowledgeChunk]:
        """Every stored chunk in insertion order."""
        with self._lock:
            return [self._chunks[i] for i in sorted(self._chunks)]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        """
        Write the index and the chunk table. An index with no vectors is not
        written.
        """
        with self._lock:
            if self._index is None:
                return

            meta = {
                "next_id": self._next_id,
                "chunks": {str(i): c.model_dump() for i, c in self._chunks.items()},
            }

            try:
                self._index_path.parent.mkdir(parents=True, exist_ok=True)
                self._meta_path.parent.mkdir(parents=True, exist_ok=True)
                faiss.write_index(self._index, str(self._index_path))
                self._meta_path.write_text(json.dumps(meta), encoding="utf-8")
            except (OSError, RuntimeError) as exc:
                raise FaissPersistenceError(f"Could not save index: {exc}") from exc

    def load(self) -> None:
        """
        Replace the in-memory state with what is on disk.

        A missing index file leaves the index empty. An index file without a
        readable chunk table is an error.
        """
        with self._lock:
            if not self._index_path.exists():
                return

            try:
                index = faiss.read_index(str(self._index_path))
            except RuntimeError as exc:
                raise FaissPersistenceError(f"Could not read index: {exc}") from exc

            try:
                meta = json.loads(self._meta_path.read_text(encoding="utf-8"))
                chunks = {
                    int(i): KnowledgeChunk(**raw)
                    for i, raw in meta["chunks"].items()
                }
                next_id = int(meta["next_id"])
            except (OSError, ValueError, KeyError, TypeError) as exc:
                raise FaissPersistenceError(f"Could not read chunk table: {exc}") from exc

            self._index = index
            self._chunks = chunks
            self._next_id = next_id
