"""
Document Store

Loads structured policy documents (one JSON object per file) from a directory.

Design choices
--------------
- Loaded lazily, exactly once per store instance, behind a lock.
- Immutable afterwards; a new store instance is the only way to reload.
- A missing directory yields an empty collection, not an error.
- A malformed file is logged and skipped; the remaining files still load.
- Document ids are the file stems and are unique within a store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from .models import MapNode, PolicyDocument, to_node

logger = logging.getLogger("aura.documents")


class DocumentStore:
    """Read-only, load-once collection of ``PolicyDocument`` records."""

    def __init__(self, directory: str) -> None:
        self._directory = Path(directory)
        self._documents: Optional[Dict[str, PolicyDocument]] = None
        self._lock = Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_documents(self) -> List[PolicyDocument]:
        """Return all loaded documents in file-name order."""
        return list(self._ensure_loaded().values())

    def get(self, doc_id: str) -> Optional[PolicyDocument]:
        return self._ensure_loaded().get(doc_id)

    def __len__(self) -> int:
        return len(self._ensure_loaded())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> Dict[str, PolicyDocument]:
        documents = self._documents
        if documents is not None:
            return documents

        with self._lock:
            if self._documents is None:
                self._documents = self._load()
            return self._documents

    def _load(self) -> Dict[str, PolicyDocument]:
        documents: Dict[str, PolicyDocument] = {}

        if not self._directory.is_dir():
            logger.info("No policy document directory at %s; structured source is empty.", self._directory)
            return documents

        for path in sorted(self._directory.glob("*.json")):
            doc_id = path.stem
            if doc_id in documents:
                logger.warning("Duplicate policy document id %r (%s); skipping.", doc_id, path.name)
                continue

            try:
                document = self._read(path)
            except Exception:
                logger.exception("Failed to load policy document %s; skipping.", path.name)
                continue

            documents[doc_id] = document

        logger.info(
            "Loaded %d policy documents: %s",
            len(documents),
            ", ".join(documents),
        )
        return documents

    @staticmethod
    def _read(path: Path) -> PolicyDocument:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)

        data = to_node(raw)
        if not isinstance(data, MapNode):
            raise ValueError(f"{path.name} must contain a JSON object")

        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            title = path.name

        return PolicyDocument(id=path.stem, title=title, data=data)
