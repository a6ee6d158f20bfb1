"""
Text Directory Ingestion

Populates a ``SemanticIndex`` from pre-extracted document text (``.txt`` and
``.md`` files). PDF text extraction happens upstream; this module only
chunks, labels and indexes the resulting text.

Each chunk id is ``<file>_chunk_<i>_<uuid>`` and carries a rough page hint of
``i // 3 + 1``.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import List

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .models import KnowledgeChunk
from .vector_index import SemanticIndex

logger = logging.getLogger("aura.ingest")

TEXT_SUFFIXES = (".txt", ".md")
CHUNKS_PER_PAGE = 3


class TextDirectoryIngestor:
    """
    Chunk every text file in a directory into the semantic index.

    Parameters
    ----------
    index : SemanticIndex
        Destination index.

    directory : str
        Directory holding extracted document text.

    chunk_size, chunk_overlap : int
        Splitter configuration, in characters.
    """

    def __init__(
        self,
        index: SemanticIndex,
        directory: str,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ) -> None:
        self._index = index
        self._directory = Path(directory)
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=["\n\n", "\n", ".", " ", ""],
        )

    def split(self, source_name: str, text: str) -> List[KnowledgeChunk]:
        """Split one document into labelled chunks."""
        pieces = [p for p in self._splitter.split_text(text) if p.strip()]
        return [
            KnowledgeChunk(
                id=f"{source_name}_chunk_{i}_{uuid.uuid4()}",
                content=piece,
                source_name=source_name,
                page_number=i // CHUNKS_PER_PAGE + 1,
            )
            for i, piece in enumerate(pieces)
        ]

    async def populate(self) -> int:
        """
        Index every text file once.

        Returns the number of chunks added. An index that already holds
        chunks is left untouched.
        """
        if self._index.count() > 0:
            logger.info("Vector index already populated; skipping ingestion.")
            return 0

        if not self._directory.is_dir():
            logger.info("No knowledge text directory at %s; skipping ingestion.", self._directory)
            return 0

        files = sorted(
            p for p in self._directory.iterdir()
            if p.is_file() and p.suffix.lower() in TEXT_SUFFIXES
        )
        if not files:
            logger.info("No text documents found in %s.", self._directory)
            return 0

        logger.info("Ingesting %d document(s) from %s", len(files), self._directory)

        total = 0
        for path in files:
            try:
                text = path.read_text(encoding="utf-8")
                chunks = self.split(path.name, text)
                if not chunks:
                    logger.warning("No content chunks for %s; skipped.", path.name)
                    continue
                await self._index.add_chunks(chunks)
            except Exception:
                logger.exception("Failed to ingest %s; skipping.", path.name)
                continue

            total += len(chunks)
            logger.info("%s: %d chunks loaded", path.name, len(chunks))

        logger.info("Ingestion complete: %d chunks in index.", self._index.count())
        return total
