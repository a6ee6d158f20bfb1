"""
Embedding Data Models

This module defines the canonical data model used to represent a single
indexed text chunk stored in the vector index.

Each instance corresponds to ONE embedding vector and ONE chunk of text.
"""

from __future__ import annotations

from typing import NamedTuple, Optional
from pydantic import BaseModel, Field, ConfigDict


class KnowledgeChunk(BaseModel):
    """
    A single indexed chunk of unstructured document text.

    This model is the authoritative schema for:
    - FAISS index storage
    - Metadata persistence to JSON
    - Semantic search result mapping
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique chunk identifier.",
    )

    content: str = Field(
        ...,
        min_length=1,
        description="Raw text content for this embedded chunk.",
    )

    source_name: str = Field(
        ...,
        min_length=1,
        description="Name of the source document (usually a file name).",
    )

    page_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Approximate page the chunk came from, when known.",
    )

    model_config = ConfigDict(
        extra="forbid",          # Prevent schema injection
        frozen=True,            # Make instances immutable once created
        arbitrary_types_allowed=False,
    )


class ScoredChunk(NamedTuple):
    """A chunk paired with its similarity score (0.0 for keyword fallback hits)."""
    chunk: KnowledgeChunk
    score: float
