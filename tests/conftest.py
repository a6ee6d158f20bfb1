import json
import os
from typing import Dict, List, Optional, Sequence

import pytest

# Settings are instantiated at import time and require an API key.
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from aura_server.embeddings.models import KnowledgeChunk, ScoredChunk  # noqa: E402
from aura_server.geo.reference import ReferenceData  # noqa: E402
from aura_server.geo.resolver import GeoResolver  # noqa: E402
from aura_server.geo.directions import DirectionsResolver  # noqa: E402
from aura_server.knowledge.store import DocumentStore  # noqa: E402
from aura_server.knowledge.router import StructuredKnowledgeRouter  # noqa: E402


GUIDE_TITLE = "UGA Community Guide 2025-2026"

COMMUNITY_GUIDE = {
    "title": GUIDE_TITLE,
    "general_information": {
        "front_desks": "Front desks are open 24 hours a day, 7 days a week.",
        "housing_office": "Call UGA Housing at 706-542-1421.",
    },
    "policies": {
        "noise_courtesy_and_quiet_hours": {
            "quiet_hours": "Sunday-Thursday 10 p.m. to 8 a.m.",
            "courtesy_hours": "Courtesy hours are in effect 24 hours a day.",
        },
        "visitation": {
            "overnight_guests": "Guests may stay a maximum of 3 consecutive nights.",
            "escort_required": True,
        },
    },
}

CONDUCT_PART1 = {
    "title": "UGA Code of Conduct (Part 1)",
    "purpose": "Standards of behavior expected of every student.",
    "sanctions": ["warning", "probation", "suspension"],
}

ACADEMIC_HONESTY = {
    "title": "UGA Academic Honesty Policy",
    "summary": "A Culture of Honesty applies to all academic work.",
}


def write_json(directory, name: str, payload) -> None:
    (directory / name).write_text(json.dumps(payload), encoding="utf-8")


class InMemoryIndex:
    """
    ``SemanticIndex`` test double.

    ``scores`` maps chunk id -> similarity returned by ``search``; chunks
    without a score are stored but never returned by vector search.
    """

    def __init__(
        self,
        chunks: Sequence[KnowledgeChunk] = (),
        scores: Optional[Dict[str, float]] = None,
    ) -> None:
        self._chunks: List[KnowledgeChunk] = list(chunks)
        self.scores: Dict[str, float] = dict(scores or {})
        self.search_calls = 0

    async def add_chunk(self, chunk_id, content, source_name, page_hint=None) -> None:
        self._chunks.append(
            KnowledgeChunk(id=chunk_id, content=content, source_name=source_name, page_number=page_hint)
        )

    async def add_chunks(self, chunks) -> None:
        self._chunks.extend(chunks)

    async def search(self, query: str, k: int) -> List[ScoredChunk]:
        self.search_calls += 1
        hits = [
            ScoredChunk(c, self.scores[c.id])
            for c in self._chunks
            if c.id in self.scores
        ]
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:k]

    def count(self) -> int:
        return len(self._chunks)

    def chunks(self) -> List[KnowledgeChunk]:
        return list(self._chunks)


def make_chunk(chunk_id: str, content: str, source: str = "housing_handbook.txt", page: Optional[int] = 1) -> KnowledgeChunk:
    return KnowledgeChunk(id=chunk_id, content=content, source_name=source, page_number=page)


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture(scope="session")
def reference() -> ReferenceData:
    return ReferenceData.load()


@pytest.fixture
def geo(reference) -> GeoResolver:
    return GeoResolver(reference)


@pytest.fixture
def directions(reference, geo) -> DirectionsResolver:
    return DirectionsResolver(reference, geo)


@pytest.fixture
def policy_dir(tmp_path):
    docs = tmp_path / "jsons"
    docs.mkdir()
    write_json(docs, "community_guide.json", COMMUNITY_GUIDE)
    write_json(docs, "code_of_conduct_part1.json", CONDUCT_PART1)
    write_json(docs, "academic_honesty_policy.json", ACADEMIC_HONESTY)
    return docs


@pytest.fixture
def store(policy_dir) -> DocumentStore:
    return DocumentStore(str(policy_dir))


@pytest.fixture
def router(store) -> StructuredKnowledgeRouter:
    return StructuredKnowledgeRouter(store)


@pytest.fixture
def memory_index() -> InMemoryIndex:
    return InMemoryIndex()
