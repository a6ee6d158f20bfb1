"""
Embeddings Package

Embedding client, persistent FAISS index, the ``SemanticIndex`` adapter and
text-directory ingestion.
"""

from .models import KnowledgeChunk, ScoredChunk
from .embedder import Embedder, EmbeddingError
from .index import FaissIndex, FaissIndexError, FaissPersistenceError
from .vector_index import FaissVectorIndex, SemanticIndex
from .ingest import TextDirectoryIngestor

__all__ = [
    "KnowledgeChunk",
    "ScoredChunk",
    "Embedder",
    "EmbeddingError",
    "FaissIndex",
    "FaissIndexError",
    "FaissPersistenceError",
    "FaissVectorIndex",
    "SemanticIndex",
    "TextDirectoryIngestor",
]
