"""
Context Assembler

Builds the single context string handed to the completion model.

Sources are queried concurrently and merged in a fixed order regardless of
which finishes first:

    policy documents -> guide sections -> semantic chunks
        -> community info -> directions

A source that raises contributes nothing; the failure is logged and the
remaining sources are still used. When no source produces text the context is
a fixed placeholder so the model always receives a non-empty block.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .semantic import SemanticResult, SemanticRetriever
from ..core.text import merge_unique
from ..geo.directions import DirectionsResolver, DirectionsResult
from ..geo.models import CommunityInfo
from ..geo.resolver import GeoResolver
from ..knowledge.router import RoutedKnowledge, StructuredKnowledgeRouter

logger = logging.getLogger("aura.assembler")

NO_CONTEXT_FOUND = "No specific policy information found for this question."


@dataclass
class AssembledContext:
    text: str
    sources: List[str] = field(default_factory=list)


def community_info_label(community_name: str) -> str:
    """Source label for a community block, without repeating "Community"."""
    if community_name.lower().endswith("community"):
        return f"{community_name} Info"
    return f"{community_name} Community Info"


def render_community_info(info: CommunityInfo) -> str:
    """Render a community record as a labelled block; empty fields are omitted."""
    lines = [f"[{community_info_label(info.community_name)}]"]

    def add(label: str, value: Any) -> None:
        if isinstance(value, list):
            value = ", ".join(value)
        if value:
            lines.append(f"{label}: {value}")

    add("Community", info.community_name)
    add("Buildings", info.buildings)
    add("Front desk", info.front_desk)
    add("Front desk phone", info.front_desk_phone)
    add("Front desk location", info.front_desk_location)
    add("Quiet hours", info.quiet_hours)
    add("Courtesy hours", info.courtesy_hours)
    add("Laundry", info.laundry)
    add("Dining nearby", info.dining_nearby)
    add("Mailroom", info.mailroom)
    add("Parking", info.parking)
    add("Room type", info.room_type)
    add("Amenities", info.amenities)

    if info.policies:
        lines.append("Community policies:")
        lines.extend(f"- {name}: {text}" for name, text in info.policies.items())

    return "\n".join(lines)


class ContextAssembler:
    """
    Fan out to every retrieval source and join the results in priority order.

    Parameters
    ----------
    router : StructuredKnowledgeRouter
        Keyword routing over structured policy documents.

    semantic : SemanticRetriever
        Vector search over unstructured chunks.

    geo : GeoResolver
        Location-to-community resolution.

    directions : DirectionsResolver
        Campus directions from the caller's community.

    top_k : int
        Number of semantic hits requested per query.
    """

    def __init__(
        self,
        router: StructuredKnowledgeRouter,
        semantic: SemanticRetriever,
        geo: GeoResolver,
        directions: DirectionsResolver,
        top_k: int = 6,
    ) -> None:
        self._router = router
        self._semantic = semantic
        self._geo = geo
        self._directions = directions
        self._top_k = top_k

    async def assemble(self, query: str, location: Optional[str] = None) -> AssembledContext:
        results = await asyncio.gather(
            self._route(query),
            self._semantic.retrieve(query, self._top_k),
            self._community(location),
            self._resolve_directions(query, location),
            return_exceptions=True,
        )

        routed = self._unwrap(results[0], "structured", RoutedKnowledge())
        semantic = self._unwrap(results[1], "semantic", SemanticResult())
        community = self._unwrap(results[2], "community", None)
        directions = self._unwrap(results[3], "directions", DirectionsResult())

        blocks: List[str] = []
        blocks.extend(routed.document_blocks)
        blocks.extend(routed.section_blocks)
        blocks.extend(semantic.blocks)

        community_sources: List[str] = []
        if community is not None:
            blocks.append(render_community_info(community))
            community_sources.append(community_info_label(community.community_name))

        if directions.text:
            blocks.append(directions.text)

        sources = merge_unique(
            routed.sources,
            semantic.sources,
            community_sources,
            directions.sources,
        )

        text = "\n\n".join(b for b in blocks if b)
        if not text:
            logger.info("No context found for query; using placeholder.")
            text = NO_CONTEXT_FOUND

        logger.debug(
            "Assembled context: %d chars, %d sources (docs=%d, sections=%d, chunks=%d, community=%s, directions=%s)",
            len(text),
            len(sources),
            len(routed.document_blocks),
            len(routed.section_blocks),
            len(semantic.blocks),
            community is not None,
            bool(directions.text),
        )
        return AssembledContext(text=text, sources=sources)

    # ------------------------------------------------------------------
    # Source wrappers
    # ------------------------------------------------------------------

    async def _route(self, query: str) -> RoutedKnowledge:
        return self._router.route(query)

    async def _community(self, location: Optional[str]) -> Optional[CommunityInfo]:
        if not location:
            return None
        return self._geo.resolve_by_name(location)

    async def _resolve_directions(self, query: str, location: Optional[str]) -> DirectionsResult:
        if not location:
            return DirectionsResult()
        return self._directions.resolve(query, location)

    @staticmethod
    def _unwrap(result: Any, name: str, empty: Any) -> Any:
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning(
                "Retrieval source %r failed; continuing without it.",
                name,
                exc_info=result,
            )
            return empty
        return result
