"""
Context Assembler Tests

End-to-end retrieval over the structured router, the semantic retriever and
the geo/directions sources, including merge order, source de-duplication,
the empty-context placeholder and per-source failure isolation.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from aura_server.knowledge import DocumentStore, StructuredKnowledgeRouter
from aura_server.retrieval import (
    NO_CONTEXT_FOUND,
    ContextAssembler,
    SemanticRetriever,
    community_info_label,
    render_community_info,
)

from conftest import GUIDE_TITLE, InMemoryIndex, make_chunk


@pytest.fixture
def semantic_index():
    return InMemoryIndex(
        [
            make_chunk("h1", "Residents must register guests at the front desk.", source="housing_handbook.txt", page=3),
            make_chunk("h2", "Bike racks are located beside each building.", source="housing_handbook.txt", page=4),
        ],
        scores={"h1": 0.42},
    )


@pytest.fixture
def assembler(router, semantic_index, geo, directions):
    return ContextAssembler(router, SemanticRetriever(semantic_index), geo, directions)


class TestScenarios:
    async def test_quiet_hours_without_location(self, assembler):
        context = await assembler.assemble("What are quiet hours?")

        assert "quiet hours: Sunday-Thursday 10 p.m. to 8 a.m." in context.text
        assert context.sources[0] == GUIDE_TITLE
        assert "Community Info" not in context.text

    async def test_rec_center_directions_from_creswell(self, assembler):
        context = await assembler.assemble(
            "How do I get to the rec center from Creswell Hall?",
            location="Creswell Hall",
        )

        assert "Directions from Creswell Hall to Ramsey Student Center:" in context.text
        assert "Distance: 0.3 miles" in context.text
        assert "Estimated walking time: about 7 minutes" in context.text
        assert "Front desk phone: 706-542-5103" in context.text
        assert "Campus Directions (Creswell Community)" in context.sources
        assert "Creswell Community Info" in context.sources

    async def test_placeholder_when_nothing_found(self, tmp_path, geo, directions):
        empty_router = StructuredKnowledgeRouter(DocumentStore(str(tmp_path)))
        assembler = ContextAssembler(empty_router, SemanticRetriever(InMemoryIndex()), geo, directions)

        context = await assembler.assemble("zzzz qqqq")

        assert context.text == NO_CONTEXT_FOUND
        assert context.text
        assert context.sources == []


class TestMergeOrder:
    async def test_fixed_source_order(self, assembler):
        context = await assembler.assemble(
            "Is cheating with overnight guests a problem? Where is the gym?",
            location="Creswell Hall",
        )
        text = context.text

        positions = [
            text.index("[UGA Academic Honesty Policy]"),
            text.index("policies > visitation"),
            text.index("[housing_handbook.txt p. 3]"),
            text.index("[Creswell Community Info]"),
            text.index("Directions from Creswell Hall to Ramsey Student Center:"),
        ]
        assert positions == sorted(positions)
        assert context.sources == [
            "UGA Academic Honesty Policy",
            GUIDE_TITLE,
            "housing_handbook.txt p. 3",
            "Creswell Community Info",
            "Campus Directions (Creswell Community)",
        ]

    async def test_order_independent_of_completion_time(self, router, geo, directions):
        class SlowIndex(InMemoryIndex):
            async def search(self, query, k):
                await asyncio.sleep(0.05)
                return await super().search(query, k)

        index = SlowIndex([make_chunk("s", "guest parking passes", page=None)], scores={"s": 0.9})
        assembler = ContextAssembler(router, SemanticRetriever(index), geo, directions)

        context = await assembler.assemble("guest policy", location="Creswell Hall")

        assert context.text.index("policies > visitation") < context.text.index("[housing_handbook.txt]")
        assert context.text.index("[housing_handbook.txt]") < context.text.index("Community Info]")

    async def test_sources_are_deduplicated(self, router, geo, directions):
        index = InMemoryIndex(
            [
                make_chunk("a", "Guest sign-in details.", source=GUIDE_TITLE, page=None),
                make_chunk("b", "More guest details.", source=GUIDE_TITLE, page=None),
            ],
            scores={"a": 0.5, "b": 0.4},
        )
        assembler = ContextAssembler(router, SemanticRetriever(index), geo, directions)

        context = await assembler.assemble("overnight guest rules")

        assert context.sources == [GUIDE_TITLE]
        assert len(context.sources) == len(set(context.sources))


class TestFailureIsolation:
    async def test_semantic_failure_is_empty_contribution(self, router, geo, directions):
        semantic = AsyncMock(spec=SemanticRetriever)
        semantic.retrieve.side_effect = RuntimeError("index exploded")
        assembler = ContextAssembler(router, semantic, geo, directions)

        context = await assembler.assemble("What are quiet hours?", location="Creswell Hall")

        assert "quiet hours:" in context.text
        assert "Front desk phone: 706-542-5103" in context.text

    async def test_router_failure_is_empty_contribution(self, semantic_index, geo, directions):
        router = MagicMock(spec=StructuredKnowledgeRouter)
        router.route.side_effect = ValueError("bad table")
        assembler = ContextAssembler(router, SemanticRetriever(semantic_index), geo, directions)

        context = await assembler.assemble("Do I need to register guests?")

        assert "[housing_handbook.txt p. 3]" in context.text
        assert context.sources == ["housing_handbook.txt p. 3"]

    async def test_unknown_location_adds_nothing(self, assembler):
        context = await assembler.assemble("Where is the gym?", location="Atlantis Tower")
        assert "Community Info" not in context.text
        assert "Directions from" not in context.text


class TestCommunityInfoBlock:
    def test_renders_all_populated_fields(self, geo):
        info = geo.resolve_by_name("Creswell Hall")
        block = render_community_info(info)

        assert block.startswith("[Creswell Community Info]")
        assert "Buildings: Creswell Hall" in block
        assert "Front desk: Creswell Hall Front Desk" in block
        assert "Front desk phone: 706-542-5103" in block
        assert "Quiet hours: " in block
        assert "Dining nearby: Snelling Dining Commons, Bolton Dining Commons" in block
        assert "Community policies:" in block

    @pytest.mark.parametrize(
        "name, label",
        [
            ("Creswell Community", "Creswell Community Info"),
            ("Oglethorpe House Community", "Oglethorpe House Community Info"),
            ("East Campus Village", "East Campus Village Community Info"),
        ],
    )
    def test_label_does_not_repeat_community(self, name, label):
        assert community_info_label(name) == label
