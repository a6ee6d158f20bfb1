"""
Semantic Retriever Tests

Covers threshold filtering, the keyword fallback, lazy single-flight
population, timeout degradation and block/source formatting.
"""

import asyncio

import pytest

from aura_server.core.text import TRUNCATION_MARKER
from aura_server.retrieval import SemanticRetriever, query_tokens

from conftest import InMemoryIndex, make_chunk


class TestQueryTokens:
    def test_short_tokens_dropped(self):
        assert query_tokens("Is my RA on the 5th floor?") == ["the", "5th", "floor"]

    def test_punctuation_splits(self):
        assert query_tokens("wi-fi/ethernet") == ["ethernet"]


class TestThresholdAndFallback:
    async def test_keeps_hits_at_or_above_threshold(self):
        index = InMemoryIndex(
            [make_chunk("a", "alpha"), make_chunk("b", "beta"), make_chunk("c", "gamma")],
            scores={"a": 0.5, "b": 0.08, "c": 0.0799},
        )
        hits = await SemanticRetriever(index).search("anything", k=5)
        assert [h.chunk.id for h in hits] == ["a", "b"]

    async def test_keyword_fallback_when_scores_too_low(self):
        index = InMemoryIndex(
            [
                make_chunk("a", "Laundry machines take mobile pay."),
                make_chunk("b", "Parking permits are sold online."),
                make_chunk("c", "The LAUNDRY room closes at midnight."),
            ],
            scores={"b": 0.01},
        )
        hits = await SemanticRetriever(index).search("Where is the laundry?", k=5)

        assert [h.chunk.id for h in hits] == ["a", "c"]
        assert all(h.score == 0.0 for h in hits)

    async def test_fallback_matches_any_token(self):
        index = InMemoryIndex(
            [make_chunk("a", "Mailroom hours"), make_chunk("b", "Bike storage"), make_chunk("c", "Quiet floors")],
        )
        hits = await SemanticRetriever(index).search("bike mailroom", k=5)
        assert [h.chunk.id for h in hits] == ["a", "b"]

    async def test_fallback_is_capped(self):
        chunks = [make_chunk(f"c{i}", "laundry info") for i in range(10)]
        hits = await SemanticRetriever(InMemoryIndex(chunks), fallback_limit=6).search("laundry", k=5)
        assert len(hits) == 6

    async def test_fallback_without_usable_tokens(self):
        index = InMemoryIndex([make_chunk("a", "an ox")])
        assert await SemanticRetriever(index).search("an ox", k=5) == []


class TestLazyPopulation:
    async def test_populates_empty_index_once(self):
        index = InMemoryIndex()
        calls = 0

        async def populate():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            await index.add_chunk("p1", "Quiet hours begin at 10 p.m.", "guide.txt", 1)

        retriever = SemanticRetriever(index, populator=populate)

        results = await asyncio.gather(*(retriever.search("quiet hours", k=3) for _ in range(5)))

        assert calls == 1
        assert all([h.chunk.id for h in r] == ["p1"] for r in results)

        await retriever.search("quiet", k=3)
        assert calls == 1

    async def test_non_empty_index_skips_populator(self):
        index = InMemoryIndex([make_chunk("a", "text")])
        calls = 0

        async def populate():
            nonlocal calls
            calls += 1

        await SemanticRetriever(index, populator=populate).search("text", k=1)
        assert calls == 0

    async def test_failed_population_is_retried(self):
        index = InMemoryIndex()
        attempts = 0

        async def populate():
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("ingestion backend unavailable")
            await index.add_chunk("p1", "laundry", "guide.txt", None)

        retriever = SemanticRetriever(index, populator=populate)

        assert await retriever.search("laundry", k=1) == []
        hits = await retriever.search("laundry", k=1)

        assert attempts == 2
        assert [h.chunk.id for h in hits] == ["p1"]

    async def test_timeout_degrades_and_population_continues(self):
        index = InMemoryIndex()
        release = asyncio.Event()

        async def slow_populate():
            await release.wait()
            await index.add_chunk("late", "laundry", "guide.txt", 1)

        retriever = SemanticRetriever(index, populator=slow_populate, timeout=0.05)

        assert await retriever.search("laundry", k=1) == []

        release.set()
        for _ in range(20):
            await asyncio.sleep(0.01)
            if index.count():
                break

        hits = await retriever.search("laundry", k=1)
        assert [h.chunk.id for h in hits] == ["late"]


class TestFailures:
    async def test_index_error_yields_no_hits(self):
        class BrokenIndex(InMemoryIndex):
            async def search(self, query, k):
                raise RuntimeError("vector backend down")

        index = BrokenIndex([make_chunk("a", "laundry")])
        assert await SemanticRetriever(index).search("laundry", k=1) == []

    async def test_slow_search_times_out(self):
        class SlowIndex(InMemoryIndex):
            async def search(self, query, k):
                await asyncio.sleep(1)
                return []

        index = SlowIndex([make_chunk("a", "laundry")])
        assert await SemanticRetriever(index, timeout=0.02).search("laundry", k=1) == []


class TestRetrieveFormatting:
    async def test_blocks_and_sources(self):
        index = InMemoryIndex(
            [
                make_chunk("a", "First chunk", source="handbook.txt", page=2),
                make_chunk("b", "Second chunk", source="handbook.txt", page=2),
                make_chunk("c", "Third chunk", source="faq.md", page=None),
            ],
            scores={"a": 0.9, "b": 0.8, "c": 0.7},
        )
        result = await SemanticRetriever(index).retrieve("chunk", k=3)

        assert result.blocks == [
            "[handbook.txt p. 2]\nFirst chunk",
            "[handbook.txt p. 2]\nSecond chunk",
            "[faq.md]\nThird chunk",
        ]
        assert result.sources == ["handbook.txt p. 2", "faq.md"]

    async def test_chunk_content_is_capped(self):
        index = InMemoryIndex([make_chunk("a", "y" * 50)], scores={"a": 0.9})
        result = await SemanticRetriever(index, max_chunk_chars=10).retrieve("y", k=1)
        assert result.blocks == ["[housing_handbook.txt p. 1]\n" + "y" * 10 + TRUNCATION_MARKER]

    async def test_empty_result(self):
        result = await SemanticRetriever(InMemoryIndex()).retrieve("anything", k=3)
        assert result.blocks == []
        assert result.sources == []
        assert result.text == ""
